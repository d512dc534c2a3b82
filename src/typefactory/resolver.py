"""Override resolution.

Given a requested type and an instance path, the resolver decides which type
the factory should actually build:

1. Instance overrides are checked first (only when the path is non-empty); the
   first matching one is taken.
2. Otherwise type overrides are checked, newest first. The first match declared
   with ``replace=True`` is taken, or the first match if none was.
3. The override type is itself resolved in the same path, so overrides chain.

Every resolution carries a :class:`ResolutionContext` listing the overrides it
has followed. Meeting an override whose original type was already requested
earlier in the same resolution means the overrides form a loop; the loop is
reported and broken by returning the type that closed it.

In trace mode the resolver does not stop at the first match. It records every
matching override in the context so that a report can show which overrides
were considered and which were selected; the result is the same as in normal
mode.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from typefactory.aliases import AliasTable
from typefactory.domain import OverrideRecord, TypeHandle
from typefactory.overrides import OverrideTable
from typefactory.reporting import Reporter, Severity

__all__ = ["ResolutionContext", "Resolver", "LoopListener"]

LoopListener = Callable[[Optional[TypeHandle], str, str], None]
"""Called with (requested type, requested name, instance path) when a loop is found."""


@dataclass
class ResolutionContext:
    """State shared by the nested lookups of one resolution.

    Attributes:
        trace: Collect every matching override instead of stopping at the first.
        visited: Overrides followed so far; in trace mode, every override
            considered, in the order they were met.
    """

    trace: bool = False
    visited: list[OverrideRecord] = field(default_factory=list)


class Resolver:
    """Find the type to build for a request."""

    def __init__(self, aliases: AliasTable, overrides: OverrideTable, reporter: Reporter):
        self._aliases = aliases
        self._overrides = overrides
        self._reporter = reporter
        self.on_loop: Optional[LoopListener] = None

    def find_override_by_type(
        self,
        requested: TypeHandle,
        path: str = "",
        context: Optional[ResolutionContext] = None,
    ) -> Optional[TypeHandle]:
        """Resolve a requested type.

        Args:
            requested: The type asked for.
            path: Full instance path of the object being created.
            context: The resolution this lookup is part of; a new one is
                started when omitted.

        Returns:
            The type to build: ``requested`` itself when no override applies,
            or None if an override names a type that cannot be resolved.
        """
        if context is None:
            context = ResolutionContext()
        requested_name = requested.get_type_name()

        if self._breaks_loop(requested, requested_name, path, context):
            return requested

        record = self._select(requested, requested_name, path, context)
        if record is None:
            return requested
        return self._follow(record, requested, requested_name, path, context)

    def find_override_by_name(
        self,
        requested_name: str,
        path: str = "",
        context: Optional[ResolutionContext] = None,
    ) -> Optional[TypeHandle]:
        """Resolve a requested type name.

        The name is first resolved as seen from ``path``, so instance and global
        aliases apply.

        Returns:
            The type to build, or None if no override applies to the name.
            Callers wanting the plain type must then look the name up themselves.
        """
        if context is None:
            context = ResolutionContext()
        requested = self._aliases.resolve(requested_name, path)

        if self._breaks_loop(requested, requested_name, path, context):
            return requested

        record = self._select(requested, requested_name, path, context)
        if record is None:
            return None
        return self._follow(record, requested, requested_name, path, context)

    def _breaks_loop(
        self,
        requested: Optional[TypeHandle],
        requested_name: str,
        path: str,
        context: ResolutionContext,
    ) -> bool:
        record = next(
            (
                visited
                for visited in context.visited
                if self._overrides.pair_matches(
                    visited.original, requested, requested_name, path
                )
            ),
            None,
        )
        if record is None:
            return False

        self._reporter.report(
            "OVRDLOOP",
            f"Recursive loop detected while finding override for '{requested_name}'.",
            Severity.ERROR,
        )
        record.mark_used()
        if not context.trace and self.on_loop is not None:
            self.on_loop(requested, requested_name, path)
        return True

    def _select(
        self,
        requested: Optional[TypeHandle],
        requested_name: str,
        path: str,
        context: ResolutionContext,
    ) -> Optional[OverrideRecord]:
        selected = None

        if path:
            for record in self._overrides.matching_inst_overrides(
                requested, requested_name, path
            ):
                context.visited.append(record)
                if selected is None:
                    selected = record
                    if not context.trace:
                        break

        if selected is None or context.trace:
            first = None
            first_replacing = None
            for record in self._overrides.matching_type_overrides(
                requested, requested_name, path
            ):
                if context.trace:
                    context.visited.append(record)
                if first is None:
                    first = record
                if record.replace and first_replacing is None:
                    first_replacing = record
                    if not context.trace:
                        break

            chosen = first_replacing or first
            if chosen is not None and not context.trace:
                context.visited.append(chosen)
            if selected is None:
                selected = chosen

        return selected

    def _follow(
        self,
        record: OverrideRecord,
        requested: Optional[TypeHandle],
        requested_name: str,
        path: str,
        context: ResolutionContext,
    ) -> Optional[TypeHandle]:
        record.mark_used()
        if context.trace:
            record.selected = True

        override = record.override
        if self._overrides.pair_matches(override, requested, requested_name, path):
            result = override.handle or self._aliases.resolve(override.type_name, path)
        elif override.handle is not None:
            result = self.find_override_by_type(override.handle, path, context)
        else:
            result = self.find_override_by_name(override.type_name, path, context)
            if result is None:
                result = self._aliases.resolve(override.type_name, path)

        if result is None:
            self._reporter.report(
                "TYPNTF",
                f"Cannot resolve override for original type '{record.original.type_name}' "
                f"because the override type '{override.type_name}' "
                "is not registered with the factory.",
                Severity.ERROR,
            )
        return result
