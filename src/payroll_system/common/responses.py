from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import current_app, jsonify

from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def ok(data: Any = None, message: str = "", status: int = 200):
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(message: str, status: int = 400):
    return jsonify({"success": False, "message": message}), status


def json_errors(view):
    """Turn domain errors into JSON responses; log anything else as a 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return fail(str(e), e.status_code)
        except Exception as e:
            logger.exception("Unhandled error in %s", view.__name__)
            if bool(current_app.config.get("DEBUG", False)):
                return fail(f"Something went wrong! {e}", 500)
            return fail("Something went wrong!", 500)

    return wrapper
