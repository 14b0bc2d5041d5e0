"""
CLI entry point.
  trackcam view [--config FILE]               open the interactive axes demo
  trackcam replay SCRIPT [--config FILE]      feed a recorded event script, print the final camera as JSON
"""
import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np
import yaml

from trackcam.config import load_config
from trackcam.core.camera import TrackballCamera
from trackcam.core.config import DEFAULT_QUEUE_SIZE
from trackcam.core.events import EventQueue, event_from_dict
from trackcam.core.exceptions import ConfigError, ValidationError
from trackcam.core.logger import setup_logging

logger = logging.getLogger(__name__)


def _load_script(path: Path) -> dict:
    """
    Replay script (YAML or JSON): optional ``viewport`` and either ``frames``
    (a list of per-frame event lists) or ``events`` (a single frame).
    """
    if not path.is_file():
        raise ValidationError(f"Replay script not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid replay script {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError(f"Replay script must be a mapping, got {type(data).__name__}")
    if "frames" in data:
        frames = data["frames"]
    elif "events" in data:
        frames = [data["events"]]
    else:
        raise ValidationError("Replay script needs 'frames' or 'events'")
    if not isinstance(frames, list) or not all(isinstance(f, list) for f in frames):
        raise ValidationError("'frames' must be a list of event lists")
    return {
        "viewport": data.get("viewport"),
        "frames": [[event_from_dict(e) for e in frame] for frame in frames],
    }


def _matrix(m: np.ndarray) -> list:
    return [[float(v) for v in row] for row in m]


def replay(script_path: str | Path, config: dict, with_matrices: bool = False) -> dict:
    """Run a replay script through a fresh camera; returns the final camera summary."""
    script = _load_script(Path(script_path))
    if script["viewport"] is not None:
        config = dict(config, viewport=list(script["viewport"]))
    camera = TrackballCamera.from_config(config)
    queue = EventQueue(int(config.get("queue_size") or DEFAULT_QUEUE_SIZE))

    changed_frames = 0
    for frame_events in script["frames"]:
        queue.extend(frame_events)
        if camera.update(queue.drain()):
            changed_frames += 1

    controller = camera.controller
    summary = {
        "frame": camera.frame.to_dict(),
        "mode": "first_person" if controller.first_person else "orbit",
        "fov_deg": float(np.degrees(controller.fov)),
        "ortho": controller.ortho,
        "distance": camera.frame.distance(),
        "viewport": list(controller.viewport),
        "frames": len(script["frames"]),
        "changed_frames": changed_frames,
        "revision": controller.revision,
        "dropped_events": queue.dropped,
    }
    if with_matrices:
        summary["view"] = _matrix(camera.view_transform())
        summary["projection"] = _matrix(camera.projection_transform())
    return summary


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="trackcam", description="TrackCam - virtual trackball camera")
    parser.add_argument("--log-level", type=str, default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log level (default: INFO or TRACKCAM_LOG_LEVEL)")
    parser.add_argument("--log-dir", type=str, default=None,
                        help="Directory for trackcam.log (default: TRACKCAM_LOG_DIR or console only)")
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="Path to YAML config (default: trackcam/config/default.yaml + TRACKCAM_CONFIG)")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("view", help="Open the interactive axes demo window")
    replay_parser = subparsers.add_parser("replay", help="Replay a recorded event script and print the final camera")
    replay_parser.add_argument("script", type=str, help="Path to YAML/JSON event script")
    replay_parser.add_argument("--matrices", action="store_true", help="Include view and projection matrices")
    args = parser.parse_args(argv)

    level = getattr(logging, args.log_level) if args.log_level else None
    setup_logging(level=level, log_dir=args.log_dir)

    try:
        config = load_config(override_path=args.config)
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)

    if args.command == "view":
        from trackcam.viewer.standalone import main as view_main
        sys.exit(view_main(args.config))

    try:
        summary = replay(args.script, config, with_matrices=args.matrices)
    except (ValidationError, ConfigError) as e:
        logger.error("Replay failed: %s", e)
        sys.exit(1)
    json.dump(summary, sys.stdout, indent=2)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
