"""Diagnostics: override traces and configuration dumps.

:class:`DebugTracer` re-runs a resolution in trace mode and reports every
override that was considered, marking the ones that were ignored. It also
renders the full override configuration of a factory.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from typefactory.domain import OverrideRecord, TypeHandle, display_name
from typefactory.matching import is_match
from typefactory.overrides import OverrideTable
from typefactory.reporting import Reporter, Severity
from typefactory.resolver import ResolutionContext, Resolver
from typefactory.type_registry import TypeRegistry

__all__ = ["TraceEntry", "OverrideTrace", "DebugTracer"]

TYPE_OVERRIDE_SCOPE = "<type override>"

_FOOTNOTE = "(*) Types with no associated type name will be printed as <unknown>"


@dataclass(frozen=True)
class TraceEntry:
    """An override considered during a traced resolution."""

    original_name: str
    scope: str
    override_name: str
    selected: bool

    @staticmethod
    def from_record(record: OverrideRecord) -> "TraceEntry":
        return TraceEntry(
            display_name(record.original.type_name),
            record.scope or TYPE_OVERRIDE_SCOPE,
            display_name(record.override.type_name),
            record.selected,
        )


@dataclass(frozen=True)
class OverrideTrace:
    """Outcome of a traced resolution.

    Attributes:
        requested_name: Name of the type that was asked for.
        path: Full instance path of the request.
        entries: Every override considered, in the order it was met.
        result: The type the factory would build, if one was found.
    """

    requested_name: str
    path: str
    entries: tuple[TraceEntry, ...]
    result: Optional[TypeHandle]

    @property
    def result_name(self) -> str:
        if self.result is None:
            return self.requested_name
        return display_name(self.result.get_type_name())


class DebugTracer:
    """Explain factory decisions without changing them."""

    def __init__(
        self,
        registry: TypeRegistry,
        overrides: OverrideTable,
        resolver: Resolver,
        reporter: Reporter,
        internal_type_patterns: Sequence[str] = (),
    ):
        self._registry = registry
        self._overrides = overrides
        self._resolver = resolver
        self._reporter = reporter
        self._internal_type_patterns = tuple(internal_type_patterns)

    def trace_by_type(self, requested: TypeHandle, path: str = "") -> OverrideTrace:
        if not self._registry.is_type_registered(requested):
            self._registry.register(requested)
        context = ResolutionContext(trace=True)
        try:
            result = self._resolver.find_override_by_type(requested, path, context)
            return self._make_trace(requested.get_type_name(), path, context, result)
        finally:
            _clear_selected(context.visited)

    def trace_by_name(self, requested_name: str, path: str = "") -> Optional[OverrideTrace]:
        """Trace a request by name.

        Returns:
            The trace, or None (with a warning) if the factory does not know the
            name at all.
        """
        if not (
            self._registry.is_type_name_registered(requested_name)
            or self._registry.is_lookup_string(requested_name)
        ):
            self._reporter.report(
                "Factory Warning",
                f"The factory does not recognize '{requested_name}' as a registered type.",
                Severity.WARNING,
            )
            return None
        context = ResolutionContext(trace=True)
        try:
            result = self._resolver.find_override_by_name(requested_name, path, context)
            return self._make_trace(requested_name, path, context, result)
        finally:
            _clear_selected(context.visited)

    def debug_create_by_type(self, requested: TypeHandle, path: str = ""):
        self._emit(self.trace_by_type(requested, path))

    def debug_create_by_name(self, requested_name: str, path: str = ""):
        trace = self.trace_by_name(requested_name, path)
        if trace is not None:
            self._emit(trace)

    def print(self, level: int = 1):
        """Report the current factory configuration.

        Args:
            level: 0 lists overrides only; 1 also lists registered types except
                internal ones; 2 lists every registered type.
        """
        self._reporter.report("FACTORY/PRINT", self.render_configuration(level), Severity.INFO)

    def render_trace(self, trace: OverrideTrace) -> str:
        lines = [
            "",
            "#### Factory Override Information (*)",
            "",
            f"Given a request for an object of type '{trace.requested_name}' with an instance",
            f"path of '{trace.path}', the factory encountered",
            "",
        ]
        if not trace.entries:
            lines += ["no relevant overrides.", ""]
        else:
            lines += [
                "the following relevant overrides. An 'x' next to a match indicates a",
                "match that was ignored.",
                "",
            ]
            lines += _table(
                ("Original Type", "Instance Path", "Override Type"),
                [(e.original_name, e.scope, e.override_name) for e in trace.entries],
                markers=["  " if e.selected else "x " for e in trace.entries],
            )
            lines.append("")
        lines += [
            "Result:",
            "",
            f"  The factory will produce an object of type '{trace.result_name}'",
            "",
            _FOOTNOTE,
            "",
            "####",
            "",
        ]
        return "\n".join(lines)

    def render_configuration(self, level: int = 1) -> str:
        inst_overrides = self._overrides.inst_overrides()
        type_overrides = self._overrides.type_overrides()
        lines = ["", "#### Factory Configuration (*)", ""]

        if not inst_overrides and not type_overrides:
            lines.append("  No instance or type overrides are registered with this factory")
        else:
            if inst_overrides:
                lines += ["Instance Overrides:", ""]
                lines += _table(
                    ("Requested Type", "Override Path", "Override Type"),
                    [
                        (
                            display_name(r.original.type_name),
                            r.scope,
                            display_name(r.override.type_name),
                        )
                        for r in inst_overrides
                    ],
                )
            else:
                lines.append("No instance overrides are registered with this factory")
            lines.append("")

            if type_overrides:
                lines += ["Type Overrides:", ""]
                lines += _table(
                    ("Requested Type", "Override Type"),
                    [
                        (display_name(r.original.type_name), display_name(r.override.type_name))
                        for r in reversed(type_overrides)
                    ],
                )
            else:
                lines.append("No type overrides are registered with this factory")

        if level >= 1:
            names = [
                type_name
                for type_name, handle in self._registry.type_names()
                if type_name == handle.get_type_name()
                and (level >= 2 or not self._is_internal(type_name))
            ]
            if names:
                total = len(self._registry.registered_types())
                lines += ["", f"All types registered with the factory: {total} total"]
                lines += ["  Type Name", "  ---------"]
                lines += [f"  {type_name}" for type_name in names]

        lines += ["", _FOOTNOTE, "", "####", ""]
        return "\n".join(lines)

    def _make_trace(
        self,
        requested_name: str,
        path: str,
        context: ResolutionContext,
        result: Optional[TypeHandle],
    ) -> OverrideTrace:
        return OverrideTrace(
            requested_name,
            path,
            tuple(TraceEntry.from_record(record) for record in context.visited),
            result,
        )

    def _emit(self, trace: OverrideTrace):
        self._reporter.report("FACTORY/DUMP", self.render_trace(trace), Severity.INFO)

    def _is_internal(self, type_name: str) -> bool:
        return any(is_match(pattern, type_name) for pattern in self._internal_type_patterns)


def _clear_selected(records: Iterable[OverrideRecord]):
    for record in records:
        record.selected = False


def _table(
    headers: Sequence[str],
    rows: list[Sequence[str]],
    markers: Optional[list[str]] = None,
) -> list[str]:
    """Lay out rows in left-aligned columns under underlined headers.

    Each row is prefixed with its marker, or two spaces when no markers are
    given. Trailing whitespace is stripped.
    """
    widths = [max([len(h)] + [len(row[i]) for row in rows]) for i, h in enumerate(headers)]
    markers = markers or ["  "] * len(rows)

    def line(prefix: str, cells: Sequence[str]) -> str:
        return (prefix + "  ".join(c.ljust(w) for c, w in zip(cells, widths))).rstrip()

    return (
        [line("  ", headers), line("  ", ["-" * w for w in widths])]
        + [line(marker, row) for marker, row in zip(markers, rows)]
    )
