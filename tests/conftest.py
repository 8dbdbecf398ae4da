"""Shared fixtures for protocol tests."""
import pytest

from apollo.protocol.protocol import Protocol

AUTHORITY = "authority"
USDC = "USDC"
APH = "APH"
THRESHOLD = 500
EVIDENCE = bytes(range(32))


class FakeClock:
    """Manually advanced clock returning Unix seconds."""

    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def fund_premium_pool(protocol: Protocol, amount: int, funder: str = "funder") -> None:
    """Top up the premium pool through the public premium path."""
    key, _ = protocol.create_policy(AUTHORITY, amount, amount)
    protocol.mint(funder, USDC, amount)
    protocol.pay_premium(funder, key)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def protocol(clock):
    protocol = Protocol(clock=clock)
    protocol.initialize(AUTHORITY, USDC, APH, THRESHOLD)
    return protocol


@pytest.fixture
def policy_key(protocol):
    key, _ = protocol.create_policy(AUTHORITY, 100, 5_000)
    return key


@pytest.fixture
def alice(protocol):
    protocol.mint("alice", USDC, 10_000)
    protocol.mint("alice", APH, 1_000)
    return "alice"


@pytest.fixture
def member(protocol, policy_key, alice):
    """Alice, enrolled in ``policy_key``. The premium pool then holds 100."""
    protocol.enroll_member(alice, policy_key)
    return alice
