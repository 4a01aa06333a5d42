"""
Admin API — Platform registry endpoints.

Blueprint: platforms_bp
Prefix: /api/platforms

Tokens are write-only: every response carries the masked form.
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify
from pydantic import ValidationError

from ..adapters.platform_api import validate_token
from ..models.platform import Platform
from ..persistence.json_store import DuplicateError, NotFoundError, StoreError
from .helpers import error, json_body, services, validation_error

logger = logging.getLogger(__name__)

platforms_bp = Blueprint("platforms", __name__)

_EDITABLE = {
    "name", "baseUrl", "base_url", "apiUrl", "api_url", "authToken", "auth_token",
    "urlScheme", "url_scheme", "description",
}


def _is_masked(token) -> bool:
    return isinstance(token, str) and token.startswith("****")


@platforms_bp.route("", methods=["GET"])
@platforms_bp.route("/", methods=["GET"])
def api_list_platforms():
    return jsonify([p.public_dict() for p in services().platforms.list()])


@platforms_bp.route("/<platform_id>", methods=["GET"])
def api_get_platform(platform_id: str):
    platform = services().platforms.get_by_id(platform_id)
    if platform is None:
        return error(f"Platform not found: {platform_id}", 404)
    return jsonify(platform.public_dict())


@platforms_bp.route("", methods=["POST"])
@platforms_bp.route("/", methods=["POST"])
def api_add_platform():
    data = json_body()
    data["builtin"] = False
    if not data.get("id") or not data.get("name"):
        return error("Missing required fields: id, name")

    try:
        platform = Platform.model_validate(data)
        services().platforms.add(platform)
    except ValidationError as e:
        return validation_error(e)
    except DuplicateError as e:
        return error(str(e), 409)
    return jsonify(platform.public_dict()), 201


@platforms_bp.route("/<platform_id>", methods=["PUT"])
def api_update_platform(platform_id: str):
    data = json_body()
    changes = {k: v for k, v in data.items() if k in _EDITABLE}
    # A masked token echoed back by the UI means "unchanged"
    for key in ("authToken", "auth_token"):
        if _is_masked(changes.get(key)):
            changes.pop(key)
    if not changes:
        return error("Nothing to update")

    try:
        platform = services().platforms.update(platform_id, changes)
    except NotFoundError as e:
        return error(str(e), 404)
    except ValidationError as e:
        return validation_error(e)
    return jsonify(platform.public_dict())


@platforms_bp.route("/<platform_id>", methods=["DELETE"])
def api_delete_platform(platform_id: str):
    svc = services()
    in_use = [r.id for r in svc.repositories.list() if r.platform_id == platform_id]
    if in_use:
        return error(
            f"Platform '{platform_id}' is used by {len(in_use)} repositories",
            409,
            in_use,
        )
    try:
        svc.platforms.delete(platform_id)
    except NotFoundError as e:
        return error(str(e), 404)
    except StoreError as e:
        return error(str(e), 400)
    return jsonify({"success": True})


@platforms_bp.route("/<platform_id>/validate", methods=["GET"])
def api_validate_platform(platform_id: str):
    platform = services().platforms.get_by_id(platform_id)
    if platform is None:
        return error(f"Platform not found: {platform_id}", 404)
    result = validate_token(platform)
    return jsonify({"id": platform_id, **result.to_dict()})
