"""Shared fixtures for argformat tests."""

import pytest

from argformat import Formatter


@pytest.fixture
def formatter() -> Formatter:
    return Formatter()
