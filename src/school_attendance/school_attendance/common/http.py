from __future__ import annotations

import logging
from datetime import date, time
from functools import wraps
from typing import Optional

from flask import jsonify

from ..core.exceptions import AlreadyPostedError, NotFoundError, StoreError, ValidationError
from .datetime_utils import parse_clock_time, parse_iso_date

logger = logging.getLogger(__name__)


def json_endpoint(view):
    """Map domain errors to JSON error responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except AlreadyPostedError as e:
            return jsonify({"success": False, "message": str(e)}), 409
        except StoreError:
            return jsonify({"success": False, "message": "Storage is unavailable, please retry"}), 503
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return jsonify({"success": False, "message": "Internal server error"}), 500

    return wrapper


def optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def optional_time(value: Optional[str], field_name: str) -> Optional[time]:
    if not value:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be HH:MM or HH:MM:SS")
    try:
        return parse_clock_time(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM or HH:MM:SS")


def optional_str_list(value, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"{field_name} must be a list of strings")
    return tuple(value)


def flag(value: Optional[str]) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}
