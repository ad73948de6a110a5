# keychain_core/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

PRIVATE = "private"
PUBLIC = "public"
SECRET = "secret"


@dataclass(frozen=True)
class AlgorithmParams:
    """
    Normalized algorithm parameters handed to a crypto provider.

    Mirrors the WebCrypto algorithm dictionaries: RSA families fill
    modulus_length / public_exponent, EC families fill named_curve.
    """
    name: str
    hash: Optional[str] = None
    modulus_length: Optional[int] = None
    public_exponent: Optional[int] = None
    named_curve: Optional[str] = None


@dataclass
class KeyHandle:
    """
    Opaque reference to live key material owned by a crypto provider.

    `key` is whatever the provider uses internally and is kept out of repr.
    """
    type: str                   # "private" | "public" | "secret"
    algorithm: AlgorithmParams
    extractable: bool = True
    usages: List[str] = field(default_factory=list)
    key: Any = field(default=None, repr=False, compare=False)


@dataclass
class KeyEntry:
    """
    One materialized leaf of a keychain.

    The dataclass fields are the serializable view (JWKs only). Live key
    handles sit outside the field set, so asdict()/to_dict() and any other
    field-driven serializer cannot reach them; use private_key / public_key.

    A pair entry carries private_jwk and public_jwk. A single-key entry,
    produced when restoring a position that held one bare JWK, carries jwk.
    """
    private_jwk: Optional[Dict[str, Any]] = None
    public_jwk: Optional[Dict[str, Any]] = None
    jwk: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        self._handles: Dict[str, KeyHandle] = {}

    @property
    def private_key(self) -> Optional[KeyHandle]:
        return self._handles.get(PRIVATE)

    @property
    def public_key(self) -> Optional[KeyHandle]:
        return self._handles.get(PUBLIC)

    @property
    def is_single(self) -> bool:
        return self.jwk is not None

    def attach(self, handle: KeyHandle) -> bool:
        """Attach a handle to the slot matching its type, unless already filled."""
        if handle.type == SECRET:
            raise ValueError("Secret keys have no key pair slot")
        if handle.type not in (PRIVATE, PUBLIC):
            raise ValueError(f"Cannot attach a {handle.type} key to a key pair entry")
        if handle.type in self._handles:
            return False
        self._handles[handle.type] = handle
        return True

    def copy(self) -> "KeyEntry":
        entry = KeyEntry(
            private_jwk=dict(self.private_jwk) if self.private_jwk is not None else None,
            public_jwk=dict(self.public_jwk) if self.public_jwk is not None else None,
            jwk=dict(self.jwk) if self.jwk is not None else None,
        )
        entry._handles.update(self._handles)
        return entry

    def published_jwk(self) -> Optional[Dict[str, Any]]:
        """The JWK this entry contributes to a JWK Set, if any."""
        if self.public_jwk is not None:
            return self.public_jwk
        if self.jwk is not None and "d" not in self.jwk:
            return self.jwk
        return None

    def to_dict(self) -> Dict[str, Any]:
        if self.is_single:
            return dict(self.jwk)
        d: Dict[str, Any] = {}
        if self.private_jwk is not None:
            d["privateJwk"] = dict(self.private_jwk)
        if self.public_jwk is not None:
            d["publicJwk"] = dict(self.public_jwk)
        return d

    def public_view(self) -> Dict[str, Any]:
        published = self.published_jwk()
        return {"publicJwk": dict(published)} if published is not None else {}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeyEntry":
        if "alg" in data and "privateJwk" not in data and "publicJwk" not in data:
            return cls(jwk=dict(data))
        return cls(
            private_jwk=dict(data["privateJwk"]) if data.get("privateJwk") is not None else None,
            public_jwk=dict(data["publicJwk"]) if data.get("publicJwk") is not None else None,
        )
