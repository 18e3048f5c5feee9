"""Test configuration and shared fixtures."""

import os

import pytest

from tinytype.surface.parser import parse
from tinytype.core.checker import typecheck


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep TINYTYPE_* variables of the calling shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("TINYTYPE_"):
            monkeypatch.delenv(name)


@pytest.fixture
def check():
    """Parse and type check a program: check(source, variant="rec", **overrides)."""

    def _check(source, variant="rec", **overrides):
        return typecheck(parse(source), variant=variant, **overrides)

    return _check
