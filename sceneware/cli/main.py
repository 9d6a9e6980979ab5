"""
CLI Main Entry Point

Sceneware command-line interface main module.
"""

import sys

from .parser import create_parser, parse_args
from .handlers import (
    handle_describe,
    handle_live,
    handle_config,
    handle_check,
)


def run_cli(args=None) -> int:
    """
    Run the CLI with given arguments.

    Args:
        args: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code (0 = success)
    """
    parsed = parse_args(args)

    # Route to appropriate handler
    handlers = {
        "describe": handle_describe,
        "live": handle_live,
        "config": handle_config,
        "check": handle_check,
    }

    command = parsed.command

    if not command:
        # No command specified - show help
        parser = create_parser()
        parser.print_help()
        return 0

    handler = handlers.get(command)
    if handler:
        return handler(parsed)
    else:
        print(f"Unknown command: {command}")
        return 1


def main():
    """Main entry point."""
    try:
        sys.exit(run_cli())
    except KeyboardInterrupt:
        print("\n🛑 Interrupted")
        sys.exit(130)
    except Exception as e:
        print(f"❌ Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
