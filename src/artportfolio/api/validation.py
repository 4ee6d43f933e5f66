"""Validation of incoming artwork write requests.

Form submissions arrive as loosely typed strings (multipart and urlencoded
bodies) or JSON values, so the checks here accept both representations and
produce a typed :class:`~artportfolio.api.models.ArtworkFields` instance.
Validation always runs before any file is stored or any record is mutated.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping

from artportfolio.api.errors import ValidationError
from artportfolio.api.models import ArtworkFields

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS: tuple[str, ...] = ("title", "description", "category", "origin", "artist")

STATUS_VALUES: frozenset[int] = frozenset({0, 1})


def parse_status(value: Any) -> int:
    """Parse a status value into ``0`` or ``1``.

    Accepts the integers ``0``/``1``, the integral floats ``0.0``/``1.0``
    (JSON numbers such as ``1.0`` decode to float), and the strings
    ``"0"``/``"1"`` (surrounding whitespace allowed).  Booleans and every
    other value are rejected, even though ``True == 1`` in Python.

    Raises:
        ValueError: If ``value`` is not one of the accepted forms.
    """
    if isinstance(value, bool):
        raise ValueError(f"status must be 0 or 1, got {value!r}")

    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float) and value.is_integer():
        parsed = int(value)
    elif isinstance(value, str) and value.strip() in {"0", "1"}:
        parsed = int(value.strip())
    else:
        raise ValueError(f"status must be 0 or 1, got {value!r}")

    if parsed not in STATUS_VALUES:
        raise ValueError(f"status must be 0 or 1, got {value!r}")
    return parsed


def is_valid_date(value: Any) -> bool:
    """Return ``True`` if ``value`` is an ISO 8601 date or datetime string.

    ``"2024-03-01"``, ``"2024-03-01T12:30:00"`` and ``"2024-03-01T12:30:00.000Z"``
    are all accepted.
    """
    if not isinstance(value, str) or not value.strip():
        return False

    text = value.strip()
    for parser in (date.fromisoformat, datetime.fromisoformat):
        try:
            parser(text)
        except ValueError:
            continue
        return True
    return False


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_artwork_fields(fields: Mapping[str, Any]) -> list[str]:
    """Check a write payload and return one message per violation.

    Args:
        fields: Raw submitted fields keyed by their wire names.

    Returns:
        Error messages in field order; an empty list means the payload is valid.
    """
    errors: list[str] = []

    for name in REQUIRED_TEXT_FIELDS:
        if _is_blank(fields.get(name)):
            errors.append(f"{name.capitalize()} is required")

    if not is_valid_date(fields.get("createdDate")):
        errors.append("Created date must be a valid date")

    try:
        parse_status(fields.get("status"))
    except ValueError:
        errors.append("Status must be 0 or 1")

    return errors


def clean_artwork_fields(fields: Mapping[str, Any]) -> ArtworkFields:
    """Validate a write payload and return trimmed, typed fields.

    Raises:
        ValidationError: If any field is missing or out of domain; ``details``
            lists every violation.
    """
    errors = validate_artwork_fields(fields)
    if errors:
        logger.info(f"Rejected artwork payload: {'; '.join(errors)}")
        raise ValidationError(errors)

    return ArtworkFields(
        title=fields["title"].strip(),
        description=fields["description"].strip(),
        category=fields["category"].strip(),
        origin=fields["origin"].strip(),
        artist=fields["artist"].strip(),
        created_date=fields["createdDate"],
        status=parse_status(fields["status"]),
    )
