# keychain_core/algorithms/rsa.py
from __future__ import annotations
import re
from typing import Any, Dict, Iterable, Optional

from ..errors import UnsupportedAlgorithmParameters
from ..models import AlgorithmParams
from ..provider import RSASSA_PKCS1_V1_5, CryptoProvider
from .base import BaseKeyPair

DEFAULT_MODULUS_LENGTH = 4096
DEFAULT_PUBLIC_EXPONENT = 65537

_HASH_LENGTH = re.compile(r"(256|384|512)$")


class RsaKeyPair(BaseKeyPair):
    """RSASSA-PKCS1-v1_5 key pairs for RS256 / RS384 / RS512."""

    name = RSASSA_PKCS1_V1_5

    def __init__(
        self,
        alg: str,
        modulus_length: Optional[int] = None,
        public_exponent: Any = None,
        usages: Optional[Iterable[str]] = None,
        provider: Optional[CryptoProvider] = None,
    ):
        match = _HASH_LENGTH.search(alg or "")
        if not match:
            raise UnsupportedAlgorithmParameters("Invalid hash length")

        algorithm = AlgorithmParams(
            name=self.name,
            hash=f"SHA-{match.group(1)}",
            modulus_length=int(modulus_length or DEFAULT_MODULUS_LENGTH),
            public_exponent=_exponent(public_exponent),
        )
        super().__init__(alg, algorithm, usages, provider)

    @classmethod
    def from_params(cls, params: Dict[str, Any], provider: Optional[CryptoProvider] = None) -> "RsaKeyPair":
        return cls(
            params.get("alg"),
            modulus_length=params.get("modulusLength"),
            public_exponent=params.get("publicExponent"),
            usages=params.get("usages"),
            provider=provider,
        )


def _exponent(value: Any) -> int:
    """Accept an int, raw big-endian bytes, a list of byte values, or a
    JSON-serialized byte array such as {"0": 1, "1": 0, "2": 1}."""
    if value is None:
        return DEFAULT_PUBLIC_EXPONENT
    if isinstance(value, bool):
        raise UnsupportedAlgorithmParameters(f"Invalid public exponent: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, dict):
        value = [value[k] for k in sorted(value, key=int)]
    try:
        return int.from_bytes(bytes(value), "big")
    except (TypeError, ValueError):
        raise UnsupportedAlgorithmParameters(f"Invalid public exponent: {value!r}") from None
