import logging

import pytest

from conftest import make_type
from typefactory.domain import TypeHandle
from typefactory.errors import FactoryFatalError
from typefactory.reporting import LoggingReporter
from typefactory.type_registry import TypeRegistry


@pytest.fixture
def registry():
    return TypeRegistry(LoggingReporter())


def test_registered_type_is_known_by_handle_and_name(registry):
    a = make_type("A")
    registry.register(a)

    assert registry.is_type_registered(a)
    assert registry.is_type_name_registered("A")
    assert registry.lookup("A") is a


def test_unregistered_type_is_unknown(registry):
    assert not registry.is_type_registered(make_type("A"))
    assert not registry.is_type_name_registered("A")
    assert registry.lookup("A") is None
    assert not registry.is_type_registered(None)


def test_registering_twice_only_warns(registry, tags):
    a = make_type("A")
    registry.register(a)
    registry.register(a)

    assert tags(logging.WARNING) == ["TPRGED"]
    assert registry.registered_types() == [a]
    assert registry.lookup("A") is a


def test_first_handle_keeps_a_duplicated_name(registry, tags):
    first = make_type("A")
    second = make_type("A")
    registry.register(first)
    registry.register(second)

    assert tags(logging.WARNING) == ["TPRGED"]
    assert registry.lookup("A") is first
    assert registry.is_type_registered(second)


@pytest.mark.parametrize("type_name", ["", "<unknown>"])
def test_unnamed_types_are_registered_but_not_by_name(registry, tags, type_name):
    handle = TypeHandle(type_name)
    registry.register(handle)
    registry.register(handle)

    assert registry.is_type_registered(handle)
    assert not registry.is_type_name_registered(type_name)
    assert tags() == []


def test_registering_none_is_fatal(registry):
    with pytest.raises(FactoryFatalError, match="NULLWR"):
        registry.register(None)


def test_declared_type_is_loaded_on_first_lookup(registry):
    a = make_type("A")
    calls = []

    def load():
        calls.append("A")
        return a

    registry.declare("A", load)
    assert not registry.is_type_registered(a)

    assert registry.is_type_name_registered("A")
    assert registry.lookup("A") is a
    assert registry.is_type_registered(a)
    assert calls == ["A"]


def test_declared_type_with_wrong_name_is_fatal(registry):
    registry.declare("A", lambda: make_type("B"))

    with pytest.raises(FactoryFatalError, match="LAZYNM"):
        registry.lookup("A")


def test_declaring_a_registered_name_is_ignored(registry):
    a = make_type("A")
    registry.register(a)
    registry.declare("A", lambda: pytest.fail("loader should not run"))

    assert registry.lookup("A") is a


def test_loader_returning_none_leaves_name_unknown(registry):
    registry.declare("A", lambda: None)

    assert registry.lookup("A") is None
    assert not registry.is_type_name_registered("A")


def test_binding_listeners_hear_about_new_names(registry):
    bound = []
    registry.add_binding_listener(lambda name, handle: bound.append((name, handle)))
    a = make_type("A")

    registry.register(a)
    registry.register(a)
    registry.register(make_type("A"))
    registry.bind_name("Alias", a)

    assert bound == [("A", a), ("Alias", a)]


def test_bind_name_keeps_existing_binding(registry):
    a, b = make_type("A"), make_type("B")
    registry.register(a)
    registry.register(b)

    assert not registry.bind_name("A", b)
    assert registry.lookup("A") is a


def test_lookup_strings(registry):
    registry.add_lookup_string("Pending")

    assert registry.is_lookup_string("Pending")
    assert not registry.is_lookup_string("Other")


def test_type_names_include_aliases_in_binding_order(registry):
    a, b = make_type("A"), make_type("B")
    registry.register(a)
    registry.bind_name("Alias", a)
    registry.register(b)

    assert list(registry.type_names()) == [("A", a), ("Alias", a), ("B", b)]
