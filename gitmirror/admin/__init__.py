"""
Admin Server — JSON HTTP API for the mirror registry.

Usage:
    python -m gitmirror.admin
    # Serves http://127.0.0.1:3001/api/...

Features:
    - Register source and mirror repositories
    - Manage platforms and their tokens (tokens are never echoed back)
    - Trigger single or bulk syncs and poll their status
    - Edit the auto-sync configuration
"""

from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
