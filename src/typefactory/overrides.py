"""Storage and matching of type and instance overrides.

Type overrides are global. They are kept newest first, so that a later
override of the same type takes precedence unless it was declared with
``replace=False``. Instance overrides apply to instance paths matching a
pattern and are kept in declaration order: the first matching one wins, so
more specific paths should be overridden first.

Either side of an override may name a type that has not been registered yet.
Such a side carries only the name until the type (or a global alias with that
name) is registered, at which point the table binds the handle.
"""

from typing import Iterator, Optional

from typefactory.aliases import AliasTable
from typefactory.domain import OverrideRecord, TypeHandle, TypePair, is_named
from typefactory.matching import is_match
from typefactory.reporting import Reporter, Severity
from typefactory.type_registry import TypeRegistry

__all__ = ["OverrideTable"]


class OverrideTable:
    """The type override and instance override collections."""

    def __init__(self, registry: TypeRegistry, aliases: AliasTable, reporter: Reporter):
        self._registry = registry
        self._aliases = aliases
        self._reporter = reporter
        self._type_overrides: list[OverrideRecord] = []
        self._inst_overrides: list[OverrideRecord] = []
        registry.add_binding_listener(self._bind)

    def type_overrides(self) -> list[OverrideRecord]:
        """Type overrides in precedence order, newest first."""
        return list(self._type_overrides)

    def inst_overrides(self) -> list[OverrideRecord]:
        """Instance overrides in precedence order, oldest first."""
        return list(self._inst_overrides)

    def set_type_override_by_type(
        self, original: TypeHandle, override: TypeHandle, replace: bool = True
    ):
        if original is override:
            self._reporter.report(
                "TYPDUP",
                "Original and override type arguments are identical: "
                f"{original.get_type_name()}",
                Severity.WARNING,
            )
        self._ensure_registered(original)
        self._ensure_registered(override)
        self._set_type_override(
            TypePair(original, original.get_type_name()),
            TypePair(override, override.get_type_name()),
            replace,
        )

    def set_type_override_by_name(
        self, original_name: str, override_name: str, replace: bool = True
    ):
        if original_name == override_name:
            self._reporter.report(
                "TYPDUP",
                f"Requested and actual type name arguments are identical: {original_name}",
                Severity.WARNING,
            )
        original = self._registry.lookup(original_name)
        override = self._registry.lookup(override_name)
        if original is None:
            self._registry.add_lookup_string(original_name)
        self._set_type_override(
            TypePair(original, original_name), TypePair(override, override_name), replace
        )

    def set_inst_override_by_type(
        self, original: TypeHandle, override: TypeHandle, pattern: str
    ):
        self._ensure_registered(original)
        self._ensure_registered(override)
        self._set_inst_override(
            TypePair(original, original.get_type_name()),
            TypePair(override, override.get_type_name()),
            pattern,
        )

    def set_inst_override_by_name(self, original_name: str, override_name: str, pattern: str):
        original = self._registry.lookup(original_name)
        override = self._registry.lookup(override_name)
        if original is None:
            self._registry.add_lookup_string(original_name)
        self._set_inst_override(
            TypePair(original, original_name), TypePair(override, override_name), pattern
        )

    def matching_inst_overrides(
        self, requested: Optional[TypeHandle], requested_name: str, path: str
    ) -> Iterator[OverrideRecord]:
        """Instance overrides applying to a request, in precedence order."""
        for record in list(self._inst_overrides):
            if self.pair_matches(record.original, requested, requested_name, path) and is_match(
                record.scope, path
            ):
                yield record

    def matching_type_overrides(
        self, requested: Optional[TypeHandle], requested_name: str, path: str = ""
    ) -> Iterator[OverrideRecord]:
        """Type overrides applying to a request, newest first."""
        for record in list(self._type_overrides):
            if self.pair_matches(record.original, requested, requested_name, path):
                yield record

    def pair_matches(
        self,
        pair: TypePair,
        requested: Optional[TypeHandle],
        requested_name: str,
        path: Optional[str] = None,
    ) -> bool:
        """Check whether one side of an override denotes the requested type.

        A side with a handle matches by identity. A side holding only a name is
        first resolved as seen from ``path`` (instance aliases included), or
        through the global names when ``path`` is None; if that still gives no
        handle it matches a request for the same name.
        """
        stored = pair.handle
        if stored is None:
            if path is None:
                stored = self._registry.lookup(pair.type_name)
            else:
                stored = self._aliases.resolve(pair.type_name, path)
        if stored is not None and requested is not None:
            return stored is requested
        return is_named(pair.type_name) and pair.type_name == requested_name

    def _set_type_override(self, original: TypePair, override: TypePair, replace: bool):
        # A non-matching entry with an unresolved original on either side ends
        # the scan; a fresh entry is then inserted ahead of it.
        replaced = False
        for record in self._type_overrides:
            if self.pair_matches(record.original, original.handle, original.type_name):
                message = (
                    f"Original type '{original.type_name}' already registered "
                    f"to produce '{record.override.type_name}'"
                )
                if not replace:
                    self._reporter.report(
                        "TPREGD",
                        message + ". Set 'replace' argument to replace the existing entry.",
                        Severity.INFO,
                    )
                    return
                self._reporter.report(
                    "TPREGR",
                    message
                    + f". Replacing with override to produce type '{override.type_name}'.",
                    Severity.INFO,
                )
                if original.resolved:
                    record.original = TypePair(original.handle, original.type_name)
                record.override = TypePair(override.handle, override.type_name)
                record.replace = replace
                replaced = True
            elif not record.original.resolved or not original.resolved:
                break

        if not replaced:
            self._type_overrides.insert(0, OverrideRecord(original, override, "", replace))

    def _set_inst_override(self, original: TypePair, override: TypePair, pattern: str):
        for record in self._inst_overrides:
            if (
                record.scope == pattern
                and record.original.handle is original.handle
                and record.original.type_name == original.type_name
                and record.override.handle is override.handle
                and record.override.type_name == override.type_name
            ):
                self._reporter.report(
                    "DUPOVRD",
                    f"Instance override for '{original.type_name}' already exists: "
                    f"override type '{override.type_name}' with full_inst_path '{pattern}'",
                    Severity.DEBUG,
                )
                return
        self._inst_overrides.append(OverrideRecord(original, override, pattern))

    def _ensure_registered(self, handle: TypeHandle):
        if not self._registry.is_type_registered(handle):
            self._registry.register(handle)

    def _bind(self, type_name: str, handle: TypeHandle):
        for record in self._type_overrides + self._inst_overrides:
            for pair in (record.original, record.override):
                if pair.handle is None and pair.type_name == type_name:
                    pair.handle = handle
