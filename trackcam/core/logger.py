"""
Logging: level, file log, timestamp.
Configure once with setup_logging(); use get_logger() everywhere.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from .config import ENV_LOG_LEVEL, ENV_LOG_DIR

ROOT_NAME = "trackcam"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s %(message)s"
_setup_done = False


def _get_level_from_env() -> int:
    raw = os.environ.get(ENV_LOG_LEVEL, "").strip().upper()
    level = getattr(logging, raw, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def _ensure_log_dir(log_dir: Optional[Path]) -> Optional[Path]:
    if log_dir is None:
        env_dir = os.environ.get(ENV_LOG_DIR)
        if env_dir:
            log_dir = Path(env_dir)
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def setup_logging(level: Optional[int] = None, log_dir: Optional[os.PathLike | str] = None) -> None:
    """
    Configure trackcam root logger: level, console handler, and a trackcam.log
    file handler when a log dir is given (or set in the environment).
    Idempotent; safe to call once at startup.
    """
    global _setup_done
    if _setup_done:
        return

    root = logging.getLogger(ROOT_NAME)
    if level is None:
        level = _get_level_from_env()
    root.setLevel(level)

    formatter = logging.Formatter(_DEFAULT_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    resolved = _ensure_log_dir(Path(log_dir) if log_dir else None)
    if resolved is not None:
        fh = logging.FileHandler(resolved / "trackcam.log", encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    _setup_done = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under trackcam.* (e.g. trackcam.controller)."""
    if not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"
    return logging.getLogger(name)
