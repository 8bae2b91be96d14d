"""ULID helpers for document ids and confirmation codes."""

from typing import Optional

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def parse_ulid(ulid_str: str) -> Optional[ULID]:
    try:
        return ULID.from_str(ulid_str)
    except (ValueError, TypeError, AttributeError):
        return None


def is_valid_ulid(ulid_str: str) -> bool:
    return parse_ulid(ulid_str) is not None


def confirmation_code(booking_id: str) -> str:
    """Short, human-readable reference shown on the confirmation step."""
    return booking_id[-8:].upper()
