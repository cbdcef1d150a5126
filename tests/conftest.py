"""Shared fixtures."""

import base58
import pytest
from solders.keypair import Keypair

from tests.factory_builders import FakeDarkfibreBackend


@pytest.fixture
def keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def private_key(keypair: Keypair) -> str:
    """Base58 64-byte keypair export, the usual wallet secret format."""
    return base58.b58encode(bytes(keypair)).decode("ascii")


@pytest.fixture
def backend() -> FakeDarkfibreBackend:
    return FakeDarkfibreBackend()
