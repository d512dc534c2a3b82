"""Alternate names for registered types.

A global alias is simply an extra name in the registry's name table. An
instance alias only applies where the instance path matches its pattern, and
takes precedence over the global names there.
"""

from typing import Optional

from typefactory.domain import AliasRecord, TypeHandle
from typefactory.matching import is_match
from typefactory.reporting import Reporter, Severity
from typefactory.type_registry import TypeRegistry

__all__ = ["AliasTable"]


class AliasTable:
    """Global and instance-scoped aliases, layered over a :class:`TypeRegistry`."""

    def __init__(self, registry: TypeRegistry, reporter: Reporter):
        self._registry = registry
        self._reporter = reporter
        self._type_aliases: list[AliasRecord] = []
        self._inst_aliases: list[AliasRecord] = []

    def set_type_alias(self, alias_name: str, target: TypeHandle):
        """Make ``alias_name`` another global name for ``target``.

        Overrides declared earlier against ``alias_name`` are bound to
        ``target`` as a result. An alias name that is already bound keeps its
        existing binding.
        """
        if not self._check_registered(target):
            return
        if self._registry.bind_name(alias_name, target):
            self._type_aliases.append(AliasRecord(alias_name, target))

    def set_inst_alias(self, alias_name: str, target: TypeHandle, pattern: str):
        """Make ``alias_name`` a name for ``target`` under matching instance paths."""
        if not self._check_registered(target):
            return
        self._inst_aliases.append(AliasRecord(alias_name, target, pattern))

    def resolve(self, type_name: str, path: str = "") -> Optional[TypeHandle]:
        """Resolve a name as seen from an instance path.

        The first instance alias for the name whose pattern matches the path
        wins; otherwise the name is looked up in the registry.
        """
        for alias in self._inst_aliases:
            if alias.alias_name == type_name and is_match(alias.scope, path):
                return alias.target
        return self._registry.lookup(type_name)

    def type_aliases(self) -> list[AliasRecord]:
        return list(self._type_aliases)

    def inst_aliases(self) -> list[AliasRecord]:
        return list(self._inst_aliases)

    def _check_registered(self, target: Optional[TypeHandle]) -> bool:
        if self._registry.is_type_registered(target):
            return True
        type_name = target.get_type_name() if target is not None else None
        self._reporter.report(
            "BDTYP",
            f"Cannot define alias of type '{type_name}' "
            "because it is not registered with the factory.",
            Severity.WARNING,
        )
        return False
