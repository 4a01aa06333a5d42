"""
Admin API — App configuration endpoints.

Blueprint: config_bp
Prefix: /api/config
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify
from pydantic import ValidationError

from ..models.config import AppConfig
from .helpers import error, json_body, services, validation_error

logger = logging.getLogger(__name__)

config_bp = Blueprint("config", __name__)


@config_bp.route("", methods=["GET"])
@config_bp.route("/", methods=["GET"])
def api_get_config():
    return jsonify(services().config.get().to_record())


@config_bp.route("", methods=["POST"])
@config_bp.route("/", methods=["POST"])
def api_update_config():
    """Merge the posted keys into the stored config."""
    data = json_body()
    changes = {k: v for k, v in data.items() if k in AppConfig.model_fields}
    unknown = sorted(set(data) - set(changes))
    if not changes:
        return error("No known config keys in request", 400, unknown or None)

    try:
        config = services().config.update(changes)
    except ValidationError as e:
        return validation_error(e)

    if unknown:
        logger.warning(f"Ignored unknown config keys: {', '.join(unknown)}")
    return jsonify(config.to_record())


@config_bp.route("/reset", methods=["POST"])
def api_reset_config():
    return jsonify(services().config.reset().to_record())
