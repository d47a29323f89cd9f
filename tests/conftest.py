from __future__ import annotations

import pytest

from tests.helpers import FakeRenderer


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()
