"""
Keychain Core Package
=====================
Descriptor-driven management of JSON Web Keys for a service.

Provides:
- KeyChain: generate (rotate) and restore a tree of key pairs plus the
  published JWK Set
- RSA (RS256/384/512) and EC (ES256/384/512) key-pair strategies
- A pluggable crypto provider (cryptography + jwcrypto by default)
"""

from .algorithms import SupportedAlgorithms, BaseKeyPair, RsaKeyPair, EcKeyPair, default_registry
from .descriptor import LeafSpec, DescriptorNode, parse_descriptor, iter_leaves
from .errors import (
    KeyChainError,
    NotSupportedError,
    InvalidDescriptorError,
    UnsupportedAlgorithmParameters,
    KeyChainStateError,
    CryptoProviderError,
)
from .keychain import KeyChain
from .models import AlgorithmParams, KeyHandle, KeyEntry
from .provider import CryptoProvider, DefaultCryptoProvider, load_crypto_provider

__all__ = [
    "KeyChain",
    "SupportedAlgorithms",
    "BaseKeyPair",
    "RsaKeyPair",
    "EcKeyPair",
    "default_registry",
    "LeafSpec",
    "DescriptorNode",
    "parse_descriptor",
    "iter_leaves",
    "AlgorithmParams",
    "KeyHandle",
    "KeyEntry",
    "CryptoProvider",
    "DefaultCryptoProvider",
    "load_crypto_provider",
    "KeyChainError",
    "NotSupportedError",
    "InvalidDescriptorError",
    "UnsupportedAlgorithmParameters",
    "KeyChainStateError",
    "CryptoProviderError",
]
