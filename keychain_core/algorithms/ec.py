# keychain_core/algorithms/ec.py
from __future__ import annotations
from typing import Any, Dict, Iterable, Optional

from ..errors import UnsupportedAlgorithmParameters
from ..models import AlgorithmParams
from ..provider import ECDSA, CryptoProvider
from .base import BaseKeyPair

# JWA identifier -> (curve, hash). ES512 uses P-521, not "P-512".
ALGORITHMS = {
    "ES256": ("P-256", "SHA-256"),
    "ES384": ("P-384", "SHA-384"),
    "ES512": ("P-521", "SHA-512"),
}


class EcKeyPair(BaseKeyPair):
    """ECDSA key pairs for ES256 / ES384 / ES512."""

    name = ECDSA

    def __init__(
        self,
        alg: str,
        named_curve: Optional[str] = None,
        usages: Optional[Iterable[str]] = None,
        provider: Optional[CryptoProvider] = None,
    ):
        if alg not in ALGORITHMS:
            raise UnsupportedAlgorithmParameters(f"Unsupported EC algorithm: {alg}")

        curve, hash_name = ALGORITHMS[alg]
        algorithm = AlgorithmParams(
            name=self.name,
            hash=hash_name,
            named_curve=named_curve or curve,
        )
        super().__init__(alg, algorithm, usages, provider)

    @classmethod
    def from_params(cls, params: Dict[str, Any], provider: Optional[CryptoProvider] = None) -> "EcKeyPair":
        return cls(
            params.get("alg"),
            named_curve=params.get("namedCurve"),
            usages=params.get("usages"),
            provider=provider,
        )

    def import_algorithm(self) -> AlgorithmParams:
        return AlgorithmParams(
            name=self.algorithm.name,
            hash=self.algorithm.hash,
            named_curve=self.algorithm.named_curve,
        )
