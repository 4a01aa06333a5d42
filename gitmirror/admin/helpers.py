"""
Admin server shared helpers.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from flask import current_app, jsonify, request
from pydantic import ValidationError

from ..services import Services


def services() -> Services:
    return current_app.config["SERVICES"]


def json_body() -> Dict[str, Any]:
    """Request JSON as a dict; {} for an empty or non-object body."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def error(message: str, status: int = 400, details: Any = None) -> Tuple[Any, int]:
    body: Dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return jsonify(body), status


def validation_error(e: ValidationError) -> Tuple[Any, int]:
    details = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in e.errors()
    ]
    return error("Invalid request", 400, details)
