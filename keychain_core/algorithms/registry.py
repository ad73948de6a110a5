# keychain_core/algorithms/registry.py
from __future__ import annotations
from typing import Dict, List, Type

from ..errors import NotSupportedError


class SupportedAlgorithms:
    """
    Maps (operation, JWA algorithm identifier) to a key-pair strategy class.

    Registrations are per instance; build one at startup and hand it to
    each KeyChain. Re-defining an identifier replaces the previous strategy,
    which is how host applications substitute their own implementations.
    """

    operations = ("importKey", "generateKey")

    def __init__(self):
        self._registry: Dict[str, Dict[str, Type]] = {op: {} for op in self.operations}

    def define(self, alg: str, operation: str, strategy: Type) -> None:
        if operation not in self._registry:
            raise NotSupportedError(operation=operation)
        self._registry[operation][alg] = strategy

    def normalize(self, operation: str, alg: str) -> Type:
        if operation not in self._registry:
            raise NotSupportedError(operation=operation)

        strategy = self._registry[operation].get(alg)
        if strategy is None:
            raise NotSupportedError(alg, operation=operation)

        return strategy

    def registered(self, operation: str) -> Dict[str, Type]:
        if operation not in self._registry:
            raise NotSupportedError(operation=operation)
        return dict(self._registry[operation])

    def supported(self, operation: str) -> List[str]:
        return sorted(self.registered(operation))
