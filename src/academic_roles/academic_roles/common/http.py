from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date
from functools import wraps

from flask import jsonify, request

from ..core.exceptions import ConflictError, DomainError, IntegrityError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (IntegrityError, 500),
)


def to_json(obj):
    """Dataclasses/dates -> JSON-ready values (dates as YYYY-MM-DD)."""
    if obj is None:
        return None
    if is_dataclass(obj):
        return {k: to_json(v) for k, v in asdict(obj).items()}
    if isinstance(obj, dict):
        return {k: to_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_json(v) for v in obj]
    if isinstance(obj, date):
        return obj.isoformat()
    if hasattr(obj, "value"):
        return obj.value
    return obj


def json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def json_endpoint(view):
    """Translate domain errors into `{success: false, error}` responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(e, kind)), 400)
            if status >= 500:
                logger.error("%s %s failed: %s", request.method, request.path, e)
            return jsonify({"success": False, "error": str(e)}), status
        except Exception:
            logger.exception("%s %s crashed", request.method, request.path)
            return jsonify({"success": False, "error": "Internal server error"}), 500

    return wrapper
