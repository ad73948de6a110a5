"""
keychain_core.utils
-------------------
base64url helpers, key id minting and the canonical JSON form used when the
JWK Set is cached for publication.
"""

from __future__ import annotations
import base64, json
from typing import Any


def b64url_encode(b: bytes) -> str:
    return base64.urlsafe_b64encode(b).rstrip(b"=").decode("ascii")


def new_kid(provider, size: int = 8) -> str:
    # kid values come from the provider's CSPRNG, never from the key itself
    return b64url_encode(provider.random_bytes(size))


def canonical_json(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
