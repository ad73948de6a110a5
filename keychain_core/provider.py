"""
keychain_core.provider
----------------------
The crypto provider is the only component that touches key material.

The engine and the key-pair strategies talk to it through four capabilities
(generate a key pair, import a JWK, export a JWK, produce random bytes),
modelled on the WebCrypto SubtleCrypto surface:

- DefaultCryptoProvider binds them to `cryptography` for key generation and
  `jwcrypto` for the JWK encoding, running the CPU-bound work on its own
  thread pool so that sibling operations really overlap.
- Any other implementation can be injected per KeyChain, e.g. for test
  isolation.
"""

from __future__ import annotations
import asyncio, functools, os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Dict, Iterable, Optional, Tuple

from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwcrypto import jwk

from .errors import CryptoProviderError, NotSupportedError
from .logger import get_logger
from .models import PRIVATE, PUBLIC, AlgorithmParams, KeyHandle

log = get_logger("keychain.provider")

RSASSA_PKCS1_V1_5 = "RSASSA-PKCS1-v1_5"
ECDSA = "ECDSA"

CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}

PRIVATE_USAGES = ("sign", "decrypt", "unwrapKey", "deriveKey", "deriveBits")
PUBLIC_USAGES = ("verify", "encrypt", "wrapKey")

# JWK members that carry key material; everything else is metadata
_MATERIAL = ("kty", "crv", "x", "y", "d", "n", "e", "p", "q", "dp", "dq", "qi")


class CryptoProvider:
    """
    Capability surface consumed by the keychain.

    Key operations are coroutines; random_bytes is synchronous.
    """
    name: str = "base"

    async def generate_key_pair(
        self,
        algorithm: AlgorithmParams,
        extractable: bool,
        usages: Iterable[str],
    ) -> Tuple[KeyHandle, KeyHandle]:
        raise NotImplementedError

    async def import_key(
        self,
        fmt: str,
        key_data: Dict[str, Any],
        algorithm: AlgorithmParams,
        extractable: bool,
        usages: Optional[Iterable[str]],
    ) -> KeyHandle:
        raise NotImplementedError

    async def export_key(self, fmt: str, handle: KeyHandle) -> Dict[str, Any]:
        raise NotImplementedError

    def random_bytes(self, n: int) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        return


class DefaultCryptoProvider(CryptoProvider):
    name = "default"

    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="keychain-crypto",
            )
        return self._executor

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, functools.partial(fn, *args))

    # --------- capabilities ----------
    async def generate_key_pair(self, algorithm, extractable, usages):
        return await self._run(self._generate, algorithm, extractable, list(usages))

    async def import_key(self, fmt, key_data, algorithm, extractable, usages):
        _check_format(fmt)
        return await self._run(self._import, dict(key_data), algorithm, extractable, usages)

    async def export_key(self, fmt, handle):
        _check_format(fmt)
        if not handle.extractable:
            raise CryptoProviderError("Key is not extractable")
        return await self._run(self._export, handle)

    def random_bytes(self, n: int) -> bytes:
        return os.urandom(n)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # --------- workers (run on the pool) ----------
    def _generate(self, algorithm: AlgorithmParams, extractable: bool, usages: list):
        if algorithm.name == RSASSA_PKCS1_V1_5:
            key = rsa.generate_private_key(
                public_exponent=algorithm.public_exponent or 65537,
                key_size=algorithm.modulus_length,
            )
        elif algorithm.name == ECDSA:
            key = ec.generate_private_key(_curve(algorithm.named_curve)())
        else:
            raise NotSupportedError(algorithm.name)

        private_usages = [u for u in usages if u in PRIVATE_USAGES]
        public_usages = [u for u in usages if u in PUBLIC_USAGES]
        if not private_usages:
            raise CryptoProviderError(f"No usable private key usages in {usages}")

        log.debug(f"[GENERATE] {algorithm.name} hash={algorithm.hash}")
        return (
            KeyHandle(PRIVATE, algorithm, extractable, private_usages, key),
            # public keys are always extractable
            KeyHandle(PUBLIC, algorithm, True, public_usages, key.public_key()),
        )

    def _export(self, handle: KeyHandle) -> Dict[str, Any]:
        key = jwk.JWK.from_pyca(handle.key)
        if handle.type == PRIVATE:
            data = dict(key.export_private(as_dict=True))
        else:
            data = dict(key.export_public(as_dict=True))
        data["key_ops"] = list(handle.usages)
        data["ext"] = True
        return data

    def _import(self, key_data: Dict[str, Any], algorithm: AlgorithmParams, extractable: bool, usages):
        expected_kty = _kty_for(algorithm.name)
        kty = key_data.get("kty")
        if kty != expected_kty:
            raise CryptoProviderError(f"JWK kty {kty!r} does not match {algorithm.name}")

        if expected_kty == "EC" and algorithm.named_curve and key_data.get("crv") != algorithm.named_curve:
            raise CryptoProviderError(
                f"JWK curve {key_data.get('crv')!r} does not match {algorithm.named_curve}"
            )

        alg = key_data.get("alg")
        if alg and algorithm.hash and not alg.endswith(algorithm.hash.rsplit("-", 1)[-1]):
            raise CryptoProviderError(f"JWK alg {alg!r} does not match {algorithm.hash}")

        key = jwk.JWK(**{k: v for k, v in key_data.items() if k in _MATERIAL})

        if key.has_private:
            kind, allowed = PRIVATE, PRIVATE_USAGES
            pyca = key.get_op_key("sign")
        else:
            kind, allowed = PUBLIC, PUBLIC_USAGES
            pyca = key.get_op_key("verify")

        if usages is None:
            usages = key_data.get("key_ops") or [allowed[0]]
        usages = list(usages)
        invalid = [u for u in usages if u not in allowed]
        if invalid:
            raise CryptoProviderError(f"Usages {invalid} are not valid for a {kind} key")

        if expected_kty == "RSA":
            public = pyca if kind == PUBLIC else pyca.public_key()
            algorithm = replace(
                algorithm,
                modulus_length=public.key_size,
                public_exponent=public.public_numbers().e,
            )
        else:
            algorithm = replace(algorithm, named_curve=key_data.get("crv"))

        log.debug(f"[IMPORT] {algorithm.name} type={kind}")
        return KeyHandle(kind, algorithm, extractable if kind == PRIVATE else True, usages, pyca)


def _check_format(fmt: str) -> None:
    if fmt != "jwk":
        raise CryptoProviderError(f"Unsupported key format: {fmt}")


def _kty_for(name: str) -> str:
    if name == RSASSA_PKCS1_V1_5:
        return "RSA"
    if name == ECDSA:
        return "EC"
    raise NotSupportedError(name)


def _curve(named_curve: Optional[str]):
    try:
        return CURVES[named_curve]
    except KeyError:
        raise NotSupportedError(named_curve) from None


def load_crypto_provider(config: dict | None = None) -> CryptoProvider:
    """
    Factory resolver for the crypto provider backing a keychain.

    For now:
        - default (cryptography + jwcrypto on a thread pool)
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("KEYCHAIN_CRYPTO_PROVIDER", "default")

    if provider == "default":
        workers = config.get("max_workers") or os.getenv("KEYCHAIN_PROVIDER_WORKERS")
        return DefaultCryptoProvider(max_workers=int(workers) if workers else None)

    raise ValueError(f"Unknown crypto provider: {provider}")


@functools.lru_cache(maxsize=None)
def get_default_provider() -> CryptoProvider:
    """Shared provider for strategies built without an explicit one."""
    return load_crypto_provider()
