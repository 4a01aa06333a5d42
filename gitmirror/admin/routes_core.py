"""
Admin API — Health and system diagnostic endpoints.

Blueprint: core_bp
Prefix: /api
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify

from .. import __version__
from ..models.repository import SyncStatus
from .helpers import services

logger = logging.getLogger(__name__)

core_bp = Blueprint("core", __name__)


@core_bp.route("/health")
def api_health():
    return jsonify({"status": "ok", "version": __version__})


@core_bp.route("/system/diagnostic")
def api_diagnostic():
    """Counts, in-flight jobs, registry issues and git availability."""
    svc = services()
    platforms = svc.platforms.list()
    repos = svc.repositories.list()

    by_status = {s.value: 0 for s in SyncStatus}
    for repo in repos:
        by_status[repo.status.value] += 1

    git_version = svc.git.version()

    return jsonify({
        "version": __version__,
        "git": {"available": git_version is not None, "version": git_version},
        "dataDir": str(svc.settings.data_dir),
        "workDir": str(svc.settings.work_dir),
        "platforms": {
            "total": len(platforms),
            "withToken": sum(1 for p in platforms if p.has_token),
        },
        "repositories": {
            "total": len(repos),
            "sources": sum(1 for r in repos if r.is_source),
            "mirrors": sum(1 for r in repos if not r.is_source),
            "byStatus": by_status,
        },
        "inFlight": svc.coordinator.in_flight(),
        "scheduler": {"running": svc.scheduler.running},
        "issues": [i.to_dict() for i in svc.issues()],
    })
