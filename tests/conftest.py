from __future__ import annotations

import pytest

from efficacy import Capabilities, define_io

from _support import FakeHttp


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def io(http: FakeHttp) -> Capabilities:
    return define_io(http=http)
