from __future__ import annotations

import pytest
from fakes import FakeClock, FakeOp

from credential_1password.keystore import MemoryKeystore


@pytest.fixture()
def fake_op() -> FakeOp:
    return FakeOp()


@pytest.fixture()
def keystore() -> MemoryKeystore:
    return MemoryKeystore()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
