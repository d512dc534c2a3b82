import logging

import pytest

from typefactory.domain import TypeHandle
from typefactory.factory import Factory


class Widget:
    def __init__(self, name, parent=None):
        self.name = name
        self.parent = parent


def make_type(type_name: str) -> TypeHandle:
    """A handle building Widgets tagged with the type name that built them."""

    def build_object(name):
        widget = Widget(name)
        widget.built_by = type_name
        return widget

    def build_component(name, parent):
        widget = Widget(name, parent)
        widget.built_by = type_name
        return widget

    return TypeHandle(type_name, build_object, build_component)


@pytest.fixture(autouse=True)
def capture_factory_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="typefactory")


@pytest.fixture
def tags(caplog):
    def logged_tags(level=logging.DEBUG):
        return [r.tag for r in caplog.records if r.levelno >= level and hasattr(r, "tag")]

    return logged_tags


@pytest.fixture
def factory():
    return Factory()


@pytest.fixture
def types(factory):
    """Types A, B, C and D, registered with the factory."""
    handles = {name: make_type(name) for name in "ABCD"}
    for handle in handles.values():
        factory.register(handle)
    return handles
