from __future__ import annotations

import hashlib
import re

_MAX_LENGTH = 63
_INVALID = re.compile(r"[^a-z0-9-]")
_FALLBACK_PREFIX = "bdl-"


def rfc1123_name(name: str) -> str:
    # DNS label: lowercase alphanumerics and "-", alphanumeric at both ends, <= 63 chars.
    normalized = _INVALID.sub("-", name.lower()).strip("-")[:_MAX_LENGTH].rstrip("-")
    if normalized:
        return normalized
    # Nothing usable left (e.g. "___"): stable name derived from the original text.
    return _FALLBACK_PREFIX + hashlib.sha256(name.encode("utf-8")).hexdigest()[:10]
