#  -*- coding: utf-8 -*-
from __future__ import annotations

import pytest

from typing import Iterator

from proplens import clear_cache


@pytest.fixture(autouse=True)
def fresh_cache() -> Iterator[None]:
    """Every test starts with an empty context cache."""
    clear_cache()
    yield
    clear_cache()
