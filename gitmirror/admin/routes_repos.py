"""
Admin API — Repository registry and sync endpoints.

Blueprint: repos_bp
Prefix: /api/repos
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify
from pydantic import ValidationError

from ..persistence.json_store import DuplicateError, NotFoundError, StoreError
from ..sync.errors import RepositoryNotFoundError
from .helpers import error, json_body, services, validation_error

logger = logging.getLogger(__name__)

repos_bp = Blueprint("repos", __name__)


@repos_bp.route("", methods=["GET"])
@repos_bp.route("/", methods=["GET"])
def api_list_repos():
    """All registered repositories with their last known status."""
    repos = services().repositories.list()
    return jsonify([r.to_record() for r in repos])


@repos_bp.route("", methods=["POST"])
@repos_bp.route("/", methods=["POST"])
def api_add_repo():
    data = json_body()
    # The UI sends platform/repo/type; accept both spellings
    record = {
        "role": data.get("role") or data.get("type"),
        "platformId": data.get("platformId") or data.get("platform"),
        "path": data.get("path") or data.get("repo"),
    }
    if data.get("branches"):
        record["branches"] = data["branches"]

    missing = [k for k, v in record.items() if not v]
    if missing:
        return error(f"Missing required fields: {', '.join(missing)}")

    try:
        repo = services().register_repository(record)
    except DuplicateError as e:
        return error(str(e), 409)
    except ValidationError as e:
        return validation_error(e)
    except StoreError as e:
        return error(str(e), 400)
    return jsonify(repo.to_record()), 201


# Registered before /<repo_id> routes so "sync-all" is never taken for an id
@repos_bp.route("/sync-all", methods=["POST"])
def api_sync_all():
    scheduled = services().coordinator.sync_all()
    return jsonify({"scheduledCount": scheduled}), 202


@repos_bp.route("/<repo_id>", methods=["GET"])
def api_get_repo(repo_id: str):
    repo = services().repositories.get_by_id(repo_id)
    if repo is None:
        return error(f"Repository not found: {repo_id}", 404)
    return jsonify(repo.to_record())


@repos_bp.route("/<repo_id>", methods=["PUT"])
def api_update_repo(repo_id: str):
    data = json_body()
    changes = {}
    if "branches" in data:
        if not isinstance(data["branches"], list):
            return error("branches must be a list")
        changes["branches"] = data["branches"]
    if not changes:
        return error("Nothing to update (only branches can be changed)")

    try:
        repo = services().repositories.update(repo_id, changes)
    except NotFoundError as e:
        return error(str(e), 404)
    except ValidationError as e:
        return validation_error(e)
    return jsonify(repo.to_record())


@repos_bp.route("/<repo_id>", methods=["DELETE"])
def api_delete_repo(repo_id: str):
    svc = services()
    if svc.coordinator.is_in_flight(repo_id):
        return error("Repository is syncing; try again when it finishes", 409)
    try:
        svc.repositories.delete(repo_id)
    except NotFoundError as e:
        return error(str(e), 404)
    return jsonify({"success": True})


@repos_bp.route("/<repo_id>/status", methods=["GET"])
def api_repo_status(repo_id: str):
    try:
        return jsonify(services().coordinator.status(repo_id))
    except RepositoryNotFoundError as e:
        return error(str(e), 404)


@repos_bp.route("/<repo_id>/sync", methods=["POST"])
def api_sync_repo(repo_id: str):
    """Start a sync. 202 when accepted, 200 with accepted=false when already running."""
    try:
        ack = services().coordinator.sync_one(repo_id)
    except RepositoryNotFoundError as e:
        return error(str(e), 404)
    return jsonify(ack.to_dict()), 202 if ack.accepted else 200
