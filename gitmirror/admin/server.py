"""
Admin Server — Flask-based HTTP API.

This provides the JSON API used by the web UI and scripts.
It should NEVER be exposed to the internet without a reverse proxy
doing authentication.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from flask import Flask, jsonify, request

from ..config.settings import Settings
from ..logging_config import setup_logging
from ..services import Services
from .routes_config import config_bp
from .routes_core import core_bp
from .routes_platforms import platforms_bp
from .routes_repos import repos_bp

logger = logging.getLogger(__name__)

# Polled by the UI; logged at DEBUG only
_POLL_SUFFIXES = ("/status", "/api/health")


def create_app(services: Optional[Services] = None) -> Flask:
    """Create the Flask application."""
    if services is None:
        services = Services.from_settings(Settings.from_env())
        services.bootstrap()

    app = Flask(__name__)
    app.config["SERVICES"] = services
    app.json.sort_keys = False

    # ── Register Blueprints ───────────────────────────────────────
    app.register_blueprint(core_bp, url_prefix="/api")                  # /api/health, /api/system/*
    app.register_blueprint(repos_bp, url_prefix="/api/repos")           # /api/repos/*
    app.register_blueprint(platforms_bp, url_prefix="/api/platforms")   # /api/platforms/*
    app.register_blueprint(config_bp, url_prefix="/api/config")         # /api/config/*

    # ── Error Handlers ────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found", "path": request.path}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_server_error(e):
        """Catch-all: return JSON for any unhandled 500."""
        logger.error(f"Unhandled 500 on {request.method} {request.path}: {e}")
        return jsonify({"error": "Internal server error", "details": str(e)}), 500

    # ── Request Logging ───────────────────────────────────────────

    @app.before_request
    def log_request_start():
        request._start_time = time.time()

    @app.after_request
    def log_request_end(response):
        duration_ms = 0
        if hasattr(request, "_start_time"):
            duration_ms = int((time.time() - request._start_time) * 1000)

        if request.path.startswith("/api/"):
            is_poll = request.method == "GET" and request.path.endswith(_POLL_SUFFIXES)
            log_fn = logger.debug if is_poll else logger.info
            log_fn(f"{request.method} {request.path} → {response.status_code} ({duration_ms}ms)")
        return response

    logger.info(f"Admin server initialized (data_dir={services.settings.data_dir})")
    return app


def run_server(
    host: str = "127.0.0.1",
    port: int = 3001,
    debug: bool = False,
    scheduler: bool = True,
) -> None:
    """
    Run the admin server.

    Args:
        host: Bind address (default: localhost only)
        port: Port to run on
        debug: Enable Flask debug mode and DEBUG logging
        scheduler: Start the auto-sync scheduler alongside the API
    """
    setup_logging(level="DEBUG" if debug else None)

    app = create_app()
    services: Services = app.config["SERVICES"]

    url = f"http://{host}:{port}"
    debug_tag = " [DEBUG]" if debug else ""
    sched_tag = "on" if scheduler else "off"

    print(f"""
╔══════════════════════════════════════════════════════════════╗
║              GITMIRROR ADMIN{debug_tag:<33} ║
╠══════════════════════════════════════════════════════════════╣
║                                                              ║
║  API running at:                                             ║
║  → {url:<58}║
║  Auto-sync scheduler: {sched_tag:<39}║
║                                                              ║
║  Press Ctrl+C to stop                                        ║
║                                                              ║
╚══════════════════════════════════════════════════════════════╝
""")

    if scheduler:
        services.scheduler.start()

    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
    finally:
        services.shutdown()
