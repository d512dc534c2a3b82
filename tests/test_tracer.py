import logging

import pytest

from conftest import make_type
from typefactory.config import FactoryConfig
from typefactory.factory import Factory
from typefactory.tracer import TYPE_OVERRIDE_SCOPE, TraceEntry


@pytest.fixture
def tracer(factory):
    return factory.tracer


def dumps(caplog, tag):
    return [r.getMessage() for r in caplog.records if getattr(r, "tag", None) == tag]


def test_trace_lists_considered_overrides(factory, types, tracer):
    a, b, c = types["A"], types["B"], types["C"]
    factory.set_inst_override_by_type(a, b, "env.agent0.*")
    factory.set_type_override_by_type(a, c)

    trace = tracer.trace_by_type(a, "env.agent0.driver0")

    assert trace.entries == (
        TraceEntry("A", "env.agent0.*", "B", True),
        TraceEntry("A", TYPE_OVERRIDE_SCOPE, "C", False),
    )
    assert trace.result is b
    assert trace.result_name == "B"


def test_trace_follows_chained_overrides(factory, types, tracer):
    a, b, c = types["A"], types["B"], types["C"]
    factory.set_type_override_by_type(a, b)
    factory.set_type_override_by_type(b, c)

    trace = tracer.trace_by_type(a)

    assert [(e.original_name, e.override_name, e.selected) for e in trace.entries] == [
        ("A", "B", True),
        ("B", "C", True),
    ]
    assert trace.result is c


def test_trace_does_not_change_the_outcome(factory, types, tracer):
    a, b, c = types["A"], types["B"], types["C"]
    factory.set_inst_override_by_type(a, b, "env.*")
    factory.set_inst_override_by_type(a, c, "env.*")
    factory.set_type_override_by_type(a, c)

    traced = tracer.trace_by_type(a, "env.x").result

    assert traced is factory.find_override_by_type(a, "env.x") is b


def test_trace_clears_selection_marks(factory, types, tracer):
    a, b = types["A"], types["B"]
    factory.set_type_override_by_type(a, b)
    factory.set_inst_override_by_type(a, b, "*")

    tracer.trace_by_type(a, "env")

    records = factory._overrides.type_overrides() + factory._overrides.inst_overrides()
    assert not any(record.selected for record in records)


def test_trace_registers_unknown_handle(factory, tracer):
    handle = make_type("Fresh")

    trace = tracer.trace_by_type(handle)

    assert factory.is_type_registered(handle)
    assert trace.entries == ()
    assert trace.result is handle


def test_trace_by_unknown_name_warns(factory, tracer, tags):
    assert tracer.trace_by_name("Nope") is None
    assert tags(logging.WARNING) == ["Factory Warning"]


def test_trace_by_name_used_only_in_overrides(factory, types, tracer):
    factory.set_type_override_by_name("Pending", "B")

    trace = tracer.trace_by_name("Pending")

    assert trace.entries == (TraceEntry("Pending", TYPE_OVERRIDE_SCOPE, "B", True),)
    assert trace.result is types["B"]


def test_trace_of_unresolvable_override_names_the_request(factory, types, tracer):
    factory.set_type_override_by_name("A", "Later")

    trace = tracer.trace_by_type(types["A"])

    assert trace.result is None
    assert trace.result_name == "A"


def test_render_trace_table(factory, types, tracer):
    a, b, c = types["A"], types["B"], types["C"]
    factory.set_inst_override_by_type(a, b, "env.agent0.*")
    factory.set_type_override_by_type(a, c)

    text = tracer.render_trace(tracer.trace_by_type(a, "env.agent0.driver0"))
    lines = text.splitlines()

    assert "Given a request for an object of type 'A' with an instance" in lines
    assert "path of 'env.agent0.driver0', the factory encountered" in lines
    header = lines.index("  Original Type  Instance Path    Override Type")
    assert lines[header + 1] == "  -------------  ---------------  -------------"
    assert lines[header + 2] == "  A" + " " * 14 + "env.agent0.*" + " " * 5 + "B"
    assert lines[header + 3] == "x A" + " " * 14 + TYPE_OVERRIDE_SCOPE + " " * 2 + "C"
    assert "  The factory will produce an object of type 'B'" in lines
    assert lines[-1] == "####"


def test_debug_create_without_overrides(factory, types, caplog):
    factory.debug_create_by_type(types["A"], "env", "a0")

    (dump,) = dumps(caplog, "FACTORY/DUMP")
    assert "path of 'env.a0', the factory encountered" in dump
    assert "no relevant overrides." in dump
    assert "object of type 'A'" in dump


def test_debug_create_by_name(factory, types, caplog):
    factory.set_type_override_by_name("A", "D")

    factory.debug_create_by_name("A", "env", "a0")

    (dump,) = dumps(caplog, "FACTORY/DUMP")
    assert "match that was ignored." in dump
    assert "object of type 'D'" in dump


def test_debug_create_by_unknown_name_emits_nothing(factory, caplog, tags):
    factory.debug_create_by_name("Nope")

    assert dumps(caplog, "FACTORY/DUMP") == []
    assert tags(logging.WARNING) == ["Factory Warning"]


def test_configuration_of_empty_factory(tracer):
    text = tracer.render_configuration(1)

    assert "  No instance or type overrides are registered with this factory" in text
    assert "Instance Overrides:" not in text
    assert "All types registered" not in text


def test_configuration_lists_overrides(factory, types, tracer):
    a, b, c, d = types["A"], types["B"], types["C"], types["D"]
    factory.set_inst_override_by_type(a, c, "env.*")
    factory.set_type_override_by_type(a, b)
    factory.set_type_override_by_type(c, d)

    lines = tracer.render_configuration(0).splitlines()

    assert "  Requested Type  Override Path  Override Type" in lines
    assert "  A" + " " * 15 + "env.*" + " " * 10 + "C" in lines
    type_rows = lines[lines.index("Type Overrides:"):]
    assert type_rows.index("  A               B") < type_rows.index("  C               D")
    assert "All types registered" not in "\n".join(lines)


def test_configuration_without_instance_overrides(factory, types, tracer):
    factory.set_type_override_by_type(types["A"], types["B"])

    text = tracer.render_configuration(0)

    assert "No instance overrides are registered with this factory" in text
    assert "Type Overrides:" in text


def test_configuration_without_type_overrides(factory, types, tracer):
    factory.set_inst_override_by_type(types["A"], types["B"], "env")

    text = tracer.render_configuration(0)

    assert "Instance Overrides:" in text
    assert "No type overrides are registered with this factory" in text


def test_configuration_type_listing_levels(caplog):
    factory = Factory(FactoryConfig(internal_type_patterns=("base_*",)))
    for name in ("base_object", "Driver"):
        factory.register(make_type(name))
    factory.set_type_alias("Alias", factory.find_type_by_name("Driver"))

    level1 = factory.tracer.render_configuration(1).splitlines()
    level2 = factory.tracer.render_configuration(2).splitlines()

    assert "All types registered with the factory: 2 total" in level1
    assert "  Driver" in level1
    assert "  base_object" not in level1
    assert "  base_object" in level2
    assert "  Alias" not in level2


def test_print_reports_configuration(factory, types, caplog):
    factory.print(0)

    (printed,) = dumps(caplog, "FACTORY/PRINT")
    assert "#### Factory Configuration (*)" in printed
    assert caplog.records[-1].levelno == logging.INFO
