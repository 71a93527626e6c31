"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Make the package and the test helpers importable without installing
root = Path(__file__).parent.parent
for path in (root, Path(__file__).parent):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from classbuilder import ClassBuilder  # noqa: E402
from jcfreader.access import ACC_FINAL, ACC_PRIVATE, ACC_PUBLIC  # noqa: E402


@pytest.fixture
def builder() -> ClassBuilder:
    return ClassBuilder()


@pytest.fixture
def minimal_class_bytes() -> bytes:
    """One deprecated field and one method with no special attributes."""
    b = ClassBuilder("com/example/Minimal")
    b.add_field(ACC_PRIVATE | ACC_FINAL, "count", "I", attributes=[("Deprecated", b"")])
    b.add_method(ACC_PUBLIC, "run", "()V")
    return b.to_bytes()
