"""Keyed-hash signing of outbound field sets."""

import hashlib
import hmac
from collections.abc import Mapping


def sign(fields: Mapping[str, str], key: str) -> str:
    """
    Sign a field set with HMAC-SHA256.

    Only the values take part: they are sorted as strings and concatenated
    with no separator, so the result does not depend on field order.

    Returns:
        Lowercase hex digest.
    """
    values = list(fields.values())
    for value in values:
        if not isinstance(value, str):
            raise TypeError(f"Field values must be strings, got {type(value).__name__}")
    if not isinstance(key, str):
        raise TypeError("Signing key must be a string")

    payload = "".join(sorted(values))
    return hmac.new(key.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()
