"""
CLI Argument Parser

Defines all CLI arguments and subcommands.
"""

import argparse
from typing import List, Optional

from .. import __version__
from ..config import config


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="sceneware",
        description="Sceneware - real-time scene narration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sceneware describe kitchen.yaml
  sceneware describe kitchen.yaml --min-confidence 0.7 --speak
  sceneware live --camera 0 --interval 3000 --duration 120
  sceneware live --identities family.yaml --history-out history.yaml
  sceneware config --show
  sceneware check tts
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Describe command (offline, one cycle)
    _add_describe_parser(subparsers)

    # Live command
    _add_live_parser(subparsers)

    # Config command
    _add_config_parser(subparsers)

    # Check command
    _add_check_parser(subparsers)

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def _add_describe_parser(subparsers):
    """Add describe subcommand parser."""
    describe = subparsers.add_parser(
        "describe",
        help="Describe a scene file",
        description="Run one narration cycle on detections loaded from a YAML scene file"
    )

    describe.add_argument("scene", help="Scene file (YAML)")
    describe.add_argument("--min-confidence", "-c", type=float,
                          help="Discard detections below this confidence (0-1)")
    describe.add_argument("--max-objects", "-n", type=int,
                          help="Narrate at most this many objects")
    describe.add_argument("--speak", action="store_true", help="Speak the description")
    describe.add_argument("--verbose", "-v", action="store_true", help="Verbose output")


def _add_live_parser(subparsers):
    """Add live subcommand parser."""
    live = subparsers.add_parser(
        "live",
        help="Real-time camera narration",
        description="Narrate a camera feed with YOLO detection and TTS"
    )

    live.add_argument("--camera", default=None,
                      help="Camera index or stream URL (default: SN_CAMERA_DEVICE)")
    live.add_argument("--model", "-m", default=None,
                      help="YOLO model (default: SN_YOLO_MODEL)")
    live.add_argument("--interval", "-i", type=int, default=None,
                      help="Detection interval in ms (default: SN_DETECTION_INTERVAL_MS)")
    live.add_argument("--duration", "-t", type=float, default=0,
                      help="Duration in seconds (0 = until Ctrl+C)")
    live.add_argument("--identities", help="Scene file whose identities seed the registry")
    live.add_argument("--no-tts", action="store_true", help="Print descriptions without speaking")
    live.add_argument("--backend", default=None,
                      help="Primary compute backend (default: SN_DETECTION_BACKEND)")
    live.add_argument("--fallback-backend", default=None,
                      help="Backend used after a fault (default: SN_FALLBACK_BACKEND)")
    live.add_argument("--history-out", help="Write narration history to this YAML file")
    live.add_argument("--verbose", "-v", action="store_true", help="Verbose output")


def _add_config_parser(subparsers):
    """Add config subcommand parser."""
    cfg = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="View and modify Sceneware configuration"
    )

    cfg.add_argument("--show", action="store_true", help="Show current config")
    cfg.add_argument("--get", metavar="KEY", help="Get config value")
    cfg.add_argument("--set", nargs=2, metavar=("KEY", "VALUE"), help="Set config value")


def _add_check_parser(subparsers):
    """Add check subcommand parser."""
    check = subparsers.add_parser(
        "check",
        help="Check components",
        description="Check which optional Sceneware components are usable"
    )

    check.add_argument("component", choices=["tts", "yolo", "all"],
                       help="Component to check")


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = create_parser()
    return parser.parse_args(args)


def get_default_camera():
    """Get default camera from config: an int index or a stream URL."""
    device = config.get("SN_CAMERA_DEVICE", "0")
    return int(device) if device.isdigit() else device
