import asyncio

import pytest

from keychain_core.provider import DefaultCryptoProvider


class ExplodingProvider(DefaultCryptoProvider):
    """Fails the test on any provider interaction."""

    async def generate_key_pair(self, *args, **kwargs):
        raise AssertionError("provider.generate_key_pair must not be called")

    async def import_key(self, *args, **kwargs):
        raise AssertionError("provider.import_key must not be called")

    async def export_key(self, *args, **kwargs):
        raise AssertionError("provider.export_key must not be called")

    def random_bytes(self, n):
        raise AssertionError("provider.random_bytes must not be called")


class RecordingProvider(DefaultCryptoProvider):
    """Counts calls and can fail generation for a given hash."""

    def __init__(self, fail_hash=None):
        super().__init__()
        self.fail_hash = fail_hash
        self.generated = []
        self.imported = []

    async def generate_key_pair(self, algorithm, extractable, usages):
        self.generated.append(algorithm)
        if algorithm.hash == self.fail_hash:
            raise RuntimeError("provider exploded")
        return await super().generate_key_pair(algorithm, extractable, usages)

    async def import_key(self, fmt, key_data, algorithm, extractable, usages):
        self.imported.append(key_data.get("kid"))
        return await super().import_key(fmt, key_data, algorithm, extractable, usages)


class BarrierProvider(DefaultCryptoProvider):
    """Holds every generation until `expected` of them have started."""

    def __init__(self, expected):
        super().__init__()
        self.expected = expected
        self.started = 0
        self.released = None

    async def generate_key_pair(self, algorithm, extractable, usages):
        if self.released is None:
            self.released = asyncio.Event()
        self.started += 1
        if self.started >= self.expected:
            self.released.set()
        await self.released.wait()
        return await super().generate_key_pair(algorithm, extractable, usages)


@pytest.fixture
def provider():
    p = DefaultCryptoProvider()
    yield p
    p.close()


@pytest.fixture
def exploding_provider():
    return ExplodingProvider()


@pytest.fixture
def rs256_descriptor():
    return {
        "id_token": {
            "signing": {
                "RS256": {"alg": "RS256", "modulusLength": 2048},
            },
        },
    }


@pytest.fixture
def recording_provider():
    p = RecordingProvider()
    yield p
    p.close()


@pytest.fixture
def failing_provider():
    p = RecordingProvider(fail_hash="SHA-384")
    yield p
    p.close()


@pytest.fixture
def barrier_provider():
    p = BarrierProvider(expected=4)
    yield p
    p.close()
