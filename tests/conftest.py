"""
Pytest configuration and shared fixtures.

Headless Qt on Linux: set QT_QPA_PLATFORM=offscreen so that widget tests run in
CI without a display. Where offscreen is not available, run under Xvfb:

  xvfb-run -a pytest tests/test_qt_input.py -v
"""
import os
import sys
from pathlib import Path

# Must set before any PySide6/Qt import
if sys.platform.startswith("linux"):
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from trackcam.config import reset_config
from trackcam.core.config import ENV_CONFIG
from trackcam.core.frame import Frame


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Every test starts from default.yaml only."""
    monkeypatch.delenv(ENV_CONFIG, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def frame():
    """Camera 5 units down +z looking at the origin; its basis is the identity."""
    return Frame.look_at(target=(0.0, 0.0, 0.0), eye=(0.0, 0.0, 5.0), up=(0.0, 1.0, 0.0))
