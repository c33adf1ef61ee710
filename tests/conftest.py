"""Shared fixtures for the sanitizer test-suite."""

import pytest

from xsscore import SanitizerEngine, Security

EXPLICIT_EVIL = [
    r"(?<!\w)on\w*",
    "style",
    "xmlns",
    "formaction",
    "form",
    "xlink:href",
    "FSCommand",
    "seekSegmentTime",
]


@pytest.fixture
def engine():
    return SanitizerEngine()


@pytest.fixture
def security():
    return Security.create()


@pytest.fixture
def explicit_security():
    return Security.create(EXPLICIT_EVIL)


@pytest.fixture
def removed_security():
    return Security.create(["test"], "[removed]")
