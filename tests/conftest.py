"""
Shared pytest fixtures for the openwith test suite.

    def test_something(machine):
        machine.add_app("Writer")
        machine.claim("Writer", ["public.plain-text"], rank="Owner")
        apps = machine.resolve("/tmp/a.txt", ["public.plain-text"])
"""

import pytest

from tests.factories import MachineFactory

MARKDOWN_TREE = ["net.example.markdown", "public.plain-text", "public.data"]


@pytest.fixture
def machine():
    """An empty machine description."""
    return MachineFactory()


@pytest.fixture
def scenario_a(machine):
    """
    Writer owns public.plain-text, Viewer is an Alternate for the markdown
    type. Compatibility checks pass (no architectures recorded).
    """
    machine.add_app("Writer", identifier="com.example.writer")
    machine.add_app("Viewer", identifier="com.example.viewer")
    machine.claim("Writer", ["public.plain-text"], rank="Owner")
    machine.claim("Viewer", ["net.example.markdown"], rank="Alternate")
    return machine


@pytest.fixture
def markdown_tree():
    return list(MARKDOWN_TREE)
