"""
keychain_core.algorithms.base
-----------------------------
Behaviour shared by every asymmetric key-pair strategy.

A strategy is built from a descriptor leaf, validates and normalizes its
parameters in the constructor (no provider round trip), and then:

- generate_key(): asks the provider for a fresh pair, exports both halves as
  JWKs and labels each with its own random kid and the JWA identifier.
- import_key(jwk): turns one serialized JWK back into a live handle.
"""

from __future__ import annotations
import asyncio
from typing import Any, Dict, Iterable, Optional

from ..models import AlgorithmParams, KeyEntry, KeyHandle
from ..provider import CryptoProvider, get_default_provider
from ..utils import new_kid

DEFAULT_USAGES = ("sign", "verify")


class BaseKeyPair:
    name: str = "base"

    def __init__(
        self,
        alg: str,
        algorithm: AlgorithmParams,
        usages: Optional[Iterable[str]] = None,
        provider: Optional[CryptoProvider] = None,
    ):
        self.alg = alg
        self.algorithm = algorithm
        self.extractable = True
        self.usages = list(usages) if usages else list(DEFAULT_USAGES)
        self.provider = provider or get_default_provider()

    @classmethod
    def from_params(cls, params: Dict[str, Any], provider: Optional[CryptoProvider] = None) -> "BaseKeyPair":
        raise NotImplementedError

    async def generate_key(self) -> KeyEntry:
        private_key, public_key = await self.provider.generate_key_pair(
            self.algorithm, self.extractable, self.usages
        )

        entry = KeyEntry()
        entry.attach(private_key)
        entry.attach(public_key)

        private_jwk, public_jwk = await asyncio.gather(
            self.provider.export_key("jwk", private_key),
            self.provider.export_key("jwk", public_key),
        )
        entry.private_jwk = self._label(private_jwk)
        entry.public_jwk = self._label(public_jwk)

        return entry

    async def import_key(self, jwk: Dict[str, Any]) -> KeyHandle:
        return await self.provider.import_key(
            "jwk", jwk, self.import_algorithm(), self.extractable, jwk.get("key_ops")
        )

    def import_algorithm(self) -> AlgorithmParams:
        return AlgorithmParams(name=self.algorithm.name, hash=self.algorithm.hash)

    def _label(self, jwk: Dict[str, Any]) -> Dict[str, Any]:
        labelled = {"kid": new_kid(self.provider), "alg": self.alg}
        labelled.update({k: v for k, v in jwk.items() if k not in ("kid", "alg")})
        return labelled

    def __repr__(self) -> str:
        return f"{type(self).__name__}(alg={self.alg!r}, algorithm={self.algorithm!r})"
