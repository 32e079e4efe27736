"""Helpers for reading JSON request bodies."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from flask import Request
from werkzeug.exceptions import BadRequest


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
) -> dict:
    """Return the JSON object body or raise a 400 error.

    Keys listed in ``required_keys`` must be present and not blank.
    """

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object.")

    missing = [key for key in required_keys or () if _is_blank(data.get(key))]
    if missing:
        raise BadRequest("Missing required fields: {}.".format(", ".join(sorted(missing))))

    return data


def string_field(
    payload: Mapping, *names: str, default: str | None = "", strip: bool = True
) -> str | None:
    """First non-null value among ``names``, stripped unless ``strip`` is off.

    Several names let a body spell one field more than one way
    (``fullName`` / ``FullName``).
    """

    for name in names:
        value = payload.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise BadRequest(f"{name} must be a string.")
        return value.strip() if strip else value
    return default
