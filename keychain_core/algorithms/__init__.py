# keychain_core/algorithms/__init__.py

from .registry import SupportedAlgorithms
from .base import BaseKeyPair
from .rsa import RsaKeyPair
from .ec import EcKeyPair


def default_registry() -> SupportedAlgorithms:
    """
    Fresh registry with the built-in strategies:
        - RS256 / RS384 / RS512 (RSASSA-PKCS1-v1_5)
        - ES256 / ES384 / ES512 (ECDSA)
    """
    registry = SupportedAlgorithms()
    for alg in ("RS256", "RS384", "RS512"):
        for operation in SupportedAlgorithms.operations:
            registry.define(alg, operation, RsaKeyPair)
    for alg in ("ES256", "ES384", "ES512"):
        for operation in SupportedAlgorithms.operations:
            registry.define(alg, operation, EcKeyPair)
    return registry


__all__ = [
    "SupportedAlgorithms",
    "BaseKeyPair",
    "RsaKeyPair",
    "EcKeyPair",
    "default_registry",
]
