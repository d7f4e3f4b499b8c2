import pytest

from s7ua.udt.registry import UdtTypeRegistry

from fakes import FakeSession


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def registry() -> UdtTypeRegistry:
    return UdtTypeRegistry()
