"""
Run the admin server directly.

Usage:
    python -m gitmirror.admin
    python -m gitmirror.admin --port 8000
    python -m gitmirror.admin --no-scheduler
"""

import argparse

from ..config.settings import Settings
from .server import run_server


def main():
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="gitmirror admin API server")
    parser.add_argument("--host", default=settings.admin_host, help="Bind address")
    parser.add_argument(
        "--port", type=int, default=settings.admin_port,
        help=f"Port (default: {settings.admin_port})",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    parser.add_argument(
        "--no-scheduler", action="store_true", help="Don't run the auto-sync scheduler"
    )

    args = parser.parse_args()

    run_server(
        host=args.host,
        port=args.port,
        debug=args.debug,
        scheduler=not args.no_scheduler,
    )


if __name__ == "__main__":
    main()
