# courier_hub/shared/ids.py
import re
import secrets

from courier_hub.core.errors import InvalidInput

_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def new_id() -> str:
    """Opaque 24-hex-char identifier"""
    return secrets.token_hex(12)


def is_valid_id(value) -> bool:
    return isinstance(value, str) and bool(_ID_PATTERN.match(value))


def validate_id(value, label: str = "id") -> str:
    """Reject malformed ids before they reach a query"""
    if not is_valid_id(value):
        raise InvalidInput(f"Invalid {label}: {value!r}")
    return value.lower()
