"""
Sceneware CLI Module

Command-line interface for offline scene descriptions and live narration.

Usage:
    from sceneware.cli import run_cli

    exit_code = run_cli(["describe", "kitchen.yaml"])
"""

from .main import main, run_cli
from .parser import create_parser, parse_args
from .handlers import (
    handle_describe,
    handle_live,
    handle_config,
    handle_check,
)

__all__ = [
    "main",
    "run_cli",
    "create_parser",
    "parse_args",
    "handle_describe",
    "handle_live",
    "handle_config",
    "handle_check",
]
