"""
Query-string authentication for S3 urls.

Builds the legacy (signature version 2) ``AWSAccessKeyId``/``Expires``/``Signature``
query string used to hand out time-limited GET urls.
"""

import base64
import hashlib
import hmac
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

import structlog

from .cloud_storage import Timeout

logger = structlog.get_logger(__name__)

UNIT_SECONDS = {
    "sec": 1,
    "second": 1,
    "min": 60,
    "minute": 60,
    "hour": 3600,
    "day": 86400,
    "week": 604800,
}

_RELATIVE_TERM = re.compile(r"([+-]?\d+)\s*(sec|second|min|minute|hour|day|week)s?\b", re.IGNORECASE)
_RELATIVE_EXPRESSION = re.compile(
    r"^\s*(?:[+-]?\d+\s*(?:sec|second|min|minute|hour|day|week)s?\b\s*)+$", re.IGNORECASE
)


def parse_time_expression(expression: str, now: Optional[float] = None) -> Optional[int]:
    """
    Parse a textual time expression into a Unix timestamp.

    Supported forms are ``now``, ``@<timestamp>``, relative terms such as
    ``+15 minutes`` or ``+1 hour 30 minutes``, and ISO-8601 date-times (naive
    values are read as UTC).

    Returns:
        The timestamp, or None when the expression is not understood
    """
    now = time.time() if now is None else now
    value = expression.strip()
    lowered = value.lower()

    if lowered == "now":
        return int(now)

    if value.startswith("@") and re.fullmatch(r"@-?\d+", value):
        return int(value[1:])

    if _RELATIVE_EXPRESSION.match(value):
        offset = sum(int(amount) * UNIT_SECONDS[unit.lower()] for amount, unit in _RELATIVE_TERM.findall(value))
        return int(now) + offset

    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp())


def resolve_expiry(timeout: Timeout, now: Optional[float] = None) -> Optional[int]:
    """
    Turn a timeout setting into an absolute Unix timestamp.

    Numbers and timedeltas are offsets from now; datetimes and strings are
    resolved to the instant they name. A string that cannot be parsed leaves
    the expiry unresolved (None), which yields an already expired url.
    """
    now = time.time() if now is None else now

    if isinstance(timeout, str):
        expires = parse_time_expression(timeout, now=now)
        if expires is None:
            logger.warning("Unparseable signed url timeout, url will be expired", timeout=timeout)
            return None
        return expires

    if isinstance(timeout, datetime):
        if timeout.tzinfo is None:
            timeout = timeout.replace(tzinfo=timezone.utc)
        return int(timeout.timestamp())

    if isinstance(timeout, timedelta):
        return int(now + timeout.total_seconds())

    return int(now + timeout)


def string_to_sign(bucket: str, path: str, expires: Optional[int]) -> str:
    """Canonical GET request description: method, empty MD5 and type, expiry, resource.

    An unresolved expiry leaves its line empty.
    """
    expiry = "" if expires is None else expires
    return f"GET\n\n\n{expiry}\n/{bucket}/{path}"


def sign(secret: str, message: str) -> str:
    """Base64 encoded HMAC-SHA1 of ``message`` keyed with ``secret``."""
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def build_query_string(key: str, secret: str, bucket: str, path: str, expires: Optional[int]) -> str:
    """Form-encoded ``AWSAccessKeyId``, ``Expires`` and ``Signature`` parameters.

    An unresolved expiry is sent as ``Expires=0``.
    """
    signature = sign(secret, string_to_sign(bucket, path, expires))
    return urlencode(
        [
            ("AWSAccessKeyId", key),
            ("Expires", 0 if expires is None else expires),
            ("Signature", signature),
        ]
    )
