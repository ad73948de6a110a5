"""
keychain_core.keychain
----------------------
KeyChain owns a descriptor and the key material materialized from it.

- rotate(): generate a fresh key pair for every descriptor leaf. Siblings are
  generated concurrently and every public JWK lands in `jwks`.
- restore() / import_keys(): rebuild live key handles from a previously
  serialized keychain.
- to_dict() / to_json(): serializable view (JWKs only, never live handles).

Lifecycle:
    empty -> materializing -> ready     (rotate; ready -> materializing again)
    empty -> importing     -> ready     (restore / import_keys)
A failed rotate or import leaves the keychain "failed"; discard it.
"""

from __future__ import annotations
import asyncio, copy, json
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from .algorithms import SupportedAlgorithms, default_registry
from .descriptor import DescriptorNode, LeafSpec, iter_leaves, parse_descriptor
from .errors import InvalidDescriptorError, KeyChainStateError, NotSupportedError
from .logger import get_logger
from .models import KeyEntry
from .provider import CryptoProvider, get_default_provider
from .utils import canonical_json

log = get_logger("keychain.engine")

EMPTY = "empty"
MATERIALIZING = "materializing"
IMPORTING = "importing"
READY = "ready"
FAILED = "failed"

# top-level names of a serialized keychain that are not key positions
RESERVED = ("descriptor", "jwks", "jwkSet")

Path = Tuple[str, ...]


class KeyChain:

    def __init__(
        self,
        descriptor: Optional[Mapping[str, Any]] = None,
        keys: Optional[Dict[str, Any]] = None,
        registry: Optional[SupportedAlgorithms] = None,
        provider: Optional[CryptoProvider] = None,
    ):
        if descriptor is None:
            descriptor = {}
        jwks = None

        # accept a serialized keychain as well as a bare descriptor
        if isinstance(descriptor, Mapping) and "descriptor" in descriptor:
            data = descriptor
            descriptor = data["descriptor"]
            jwks = data.get("jwks")
            if keys is None:
                keys = {k: v for k, v in data.items() if k not in RESERVED}

        self.descriptor = descriptor
        self.materialized: Dict[str, Any] = dict(keys or {})
        self.jwks: Dict[str, list] = {"keys": [dict(k) for k in (jwks or {}).get("keys", [])]}
        self.jwk_set: Optional[str] = None
        self.state = EMPTY
        self.registry = registry or default_registry()
        self.provider = provider or get_default_provider()

    # ---------------------------
    # Generation
    # ---------------------------
    @classmethod
    async def generate(cls, descriptor, registry=None, provider=None) -> "KeyChain":
        return await cls(descriptor, registry=registry, provider=provider).rotate()

    async def rotate(self) -> "KeyChain":
        """Regenerate every key declared by the descriptor, then cache the JWK Set."""
        if self.state in (MATERIALIZING, IMPORTING):
            raise KeyChainStateError(f"Cannot rotate while {self.state}")
        if self.state == FAILED:
            raise KeyChainStateError("Cannot rotate a failed keychain; build a new one")

        node = parse_descriptor(self.descriptor)
        for name in RESERVED:
            if name in node.children:
                raise InvalidDescriptorError(name, self.descriptor[name], (name,))

        # resolve and validate every leaf before the first provider call
        strategies = {
            path: self._strategy("generateKey", leaf.params, path)
            for path, leaf in iter_leaves(node)
        }

        self.state = MATERIALIZING
        self.materialized = {}
        self.jwks = {"keys": []}

        try:
            await self._rotate_node(node, self.materialized, strategies, ())
        except BaseException:
            self.state = FAILED
            log.error(f"[ROTATE FAILED] leaves={len(strategies)}")
            raise

        # cache the serialization of the JWK Set for publication
        self.jwk_set = canonical_json(self.jwks)
        self.state = READY
        log.info(f"[ROTATE] leaves={len(strategies)} jwks={len(self.jwks['keys'])}")
        return self

    async def _rotate_node(self, node: DescriptorNode, container: Dict[str, Any], strategies, path: Path):
        pending = []
        for key, child in node.children.items():
            child_path = path + (key,)
            if isinstance(child, LeafSpec):
                pending.append(self._generate_leaf(key, container, strategies[child_path], child_path))
            else:
                container.setdefault(key, {})
                pending.append(self._rotate_node(child, container[key], strategies, child_path))

        # no cancellation: siblings of a failed leaf keep running
        await asyncio.gather(*pending)

    async def _generate_leaf(self, key: str, container: Dict[str, Any], strategy, path: Path):
        entry = await strategy.generate_key()
        container[key] = entry

        if entry.public_jwk is not None:
            self.jwks["keys"].append(entry.public_jwk)

        log.debug(f"[ROTATE LEAF] {'.'.join(path)} alg={strategy.alg}")

    # ---------------------------
    # Restoration
    # ---------------------------
    @classmethod
    async def restore(cls, data: Mapping[str, Any], registry=None, provider=None) -> "KeyChain":
        """
        Build a keychain from serialized data and re-import its keys.

        `data` is {"descriptor": ..., <key tree>, "jwks": {...}} as produced by
        to_dict(). Positions may also hold KeyEntry objects from another
        keychain; handles they already carry are reused, not re-imported.
        The input is never mutated.
        """
        data = dict(data)
        data.setdefault("descriptor", {})
        keychain = cls(data, registry=registry, provider=provider)
        return await keychain.import_keys()

    async def import_keys(self) -> "KeyChain":
        if self.state != EMPTY:
            raise KeyChainStateError(f"Cannot import keys into a {self.state} keychain")

        self.state = IMPORTING
        try:
            self.materialized = _materialize(self.materialized, ())
            await self._import_node(self.materialized, ())
        except BaseException:
            self.state = FAILED
            log.error("[IMPORT FAILED]")
            raise

        if not self.jwks["keys"]:
            published = (entry.published_jwk() for _, entry in self.entries())
            self.jwks = {"keys": [dict(jwk) for jwk in published if jwk is not None]}

        self.jwk_set = canonical_json(self.jwks)
        self.state = READY
        log.info(f"[IMPORT] entries={sum(1 for _ in self.entries())}")
        return self

    async def _import_node(self, node: Dict[str, Any], path: Path):
        pending = []
        for key, child in node.items():
            if isinstance(child, KeyEntry):
                pending.append(self._import_entry(child, path + (key,)))
            else:
                pending.append(self._import_node(child, path + (key,)))
        await asyncio.gather(*pending)

    async def _import_entry(self, entry: KeyEntry, path: Path):
        if entry.is_single:
            if entry.private_key is None and entry.public_key is None:
                entry.attach(await self._import_jwk(entry.jwk, path))
            return

        pending = []
        if entry.private_jwk is not None and entry.private_key is None:
            pending.append(self._import_jwk(entry.private_jwk, path))
        if entry.public_jwk is not None and entry.public_key is None:
            pending.append(self._import_jwk(entry.public_jwk, path))

        for handle in await asyncio.gather(*pending):
            entry.attach(handle)

    async def _import_jwk(self, jwk: Dict[str, Any], path: Path):
        strategy = self._strategy("importKey", {"alg": jwk.get("alg")}, path)
        return await strategy.import_key(jwk)

    # ---------------------------
    # Helpers
    # ---------------------------
    def _strategy(self, operation: str, params: Dict[str, Any], path: Path):
        try:
            strategy = self.registry.normalize(operation, params.get("alg"))
        except NotSupportedError as err:
            err.path = path
            raise
        return strategy.from_params(params, provider=self.provider)

    def get(self, path: Union[str, Path]) -> Union[KeyEntry, Dict[str, Any]]:
        if isinstance(path, str):
            path = tuple(path.split("."))
        node: Any = self.materialized
        for key in path:
            if not isinstance(node, dict):
                raise KeyError(".".join(path))
            node = node[key]
        return node

    def __getitem__(self, key: str):
        return self.materialized[key]

    def __contains__(self, key: str) -> bool:
        return key in self.materialized

    def entries(self) -> Iterator[Tuple[Path, KeyEntry]]:
        return _walk(self.materialized, ())

    def public_jwks(self) -> Dict[str, list]:
        return {"keys": [dict(k) for k in self.jwks["keys"]]}

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"descriptor": copy.deepcopy(self.descriptor)}
        d.update(_serialize(self.materialized))
        d["jwks"] = self.public_jwks()
        return d

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return f"KeyChain(state={self.state!r}, entries={sum(1 for _ in self.entries())})"


def _materialize(node: Mapping[str, Any], path: Path) -> Dict[str, Any]:
    """Turn a serialized key tree into dicts of KeyEntry, copying as it goes."""
    result: Dict[str, Any] = {}
    for key, value in node.items():
        child_path = path + (key,)
        if isinstance(value, KeyEntry):
            result[key] = value.copy()
        elif isinstance(value, Mapping) and ("alg" in value or "privateJwk" in value or "publicJwk" in value):
            result[key] = KeyEntry.from_dict(dict(value))
        elif isinstance(value, Mapping):
            result[key] = _materialize(value, child_path)
        else:
            raise InvalidDescriptorError(key, value, child_path)
    return result


def _serialize(node: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.to_dict() if isinstance(value, KeyEntry) else _serialize(value)
        for key, value in node.items()
    }


def _walk(node: Dict[str, Any], path: Path) -> Iterator[Tuple[Path, KeyEntry]]:
    for key, value in node.items():
        if isinstance(value, KeyEntry):
            yield path + (key,), value
        else:
            yield from _walk(value, path + (key,))
