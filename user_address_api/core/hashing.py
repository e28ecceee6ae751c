"""
Content-hash keys for addresses and users.

Both keys are lowercase hex digests over lower-cased input, so values that
differ only by letter case map to the same row. Missing fields hash as "".
"""

from __future__ import annotations

import hashlib
from typing import Any


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def address_key(
    country_id: Any = None,
    city: Any = None,
    state: Any = None,
    zip_code: Any = None,
) -> str:
    combined = "".join(_text(v) for v in (country_id, city, state, zip_code)).lower()
    return hashlib.md5(combined.encode("utf-8")).hexdigest()


def user_key(email: Any) -> str:
    return sha256_hex(_text(email).lower())
