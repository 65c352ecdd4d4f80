import re
from typing import Optional

from apps.api.app.exceptions import ValidationError

APP_ID_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*(\.[a-zA-Z][a-zA-Z0-9_]*)+$")
TWO_LETTER_RE = re.compile(r"^[a-z]{2}$")


def _norm(x: Optional[str]) -> Optional[str]:
    if x is None:
        return None
    x = str(x).strip()
    return x or None


def require(name: str, value: Optional[str], hint: str = "") -> str:
    value = _norm(value)
    if value is None:
        raise ValidationError(f"Missing required parameter: {name}{hint}")
    return value


def app_id(value: Optional[str]) -> str:
    value = require("appid", value)
    if not APP_ID_RE.match(value):
        raise ValidationError(
            "Invalid parameter: appid",
            details=f"'{value}' is not a Google Play package name (e.g. com.whatsapp)",
        )
    return value


def two_letter_code(name: str, value: Optional[str], default: Optional[str] = None) -> Optional[str]:
    value = _norm(value) or _norm(default)
    if value is None:
        return None
    value = value.lower()
    if not TWO_LETTER_RE.match(value):
        raise ValidationError(
            f"Invalid parameter: {name}",
            details=f"'{value}' is not a two-letter code",
        )
    return value


def optional(value: Optional[str]) -> Optional[str]:
    return _norm(value)
