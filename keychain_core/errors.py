"""
keychain_core.errors
--------------------
Failure types raised by the keychain engine, the algorithm registry and the
key-pair strategies. Errors coming out of a crypto provider are passed
through untouched.
"""

from __future__ import annotations
from typing import Any, Optional, Tuple


class KeyChainError(Exception):
    pass


class NotSupportedError(KeyChainError):
    """Unknown registry operation or algorithm identifier."""

    def __init__(
        self,
        algorithm: Optional[str] = None,
        operation: Optional[str] = None,
        path: Optional[Tuple[str, ...]] = None,
    ):
        self.algorithm = algorithm
        self.operation = operation
        self.path = path

        if algorithm is None and operation is not None:
            message = f"Operation '{operation}' is not supported"
        else:
            message = f"{algorithm} is not a supported algorithm"

        super().__init__(message)


class InvalidDescriptorError(KeyChainError):
    def __init__(self, key: str, value: Any, path: Optional[Tuple[str, ...]] = None):
        self.key = key
        self.value = value
        self.path = path or (key,)
        super().__init__(f'Invalid descriptor for key "{key}": {value!r}')


class UnsupportedAlgorithmParameters(KeyChainError):
    pass


class KeyChainStateError(KeyChainError):
    pass


class CryptoProviderError(KeyChainError):
    pass
