"""Domain models used throughout the factory."""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from typefactory.matching import has_wildcard

__all__ = [
    "UNKNOWN_TYPE_NAME",
    "TypeHandle",
    "TypePair",
    "OverrideRecord",
    "AliasRecord",
    "class_handle",
    "display_name",
    "instance_path",
    "is_named",
]

UNKNOWN_TYPE_NAME = "<unknown>"
"""Name reported by types that have no associated type name."""

ObjectFactory = Callable[[str], Any]
ComponentFactory = Callable[[str, Any], Any]


@dataclass(frozen=True, eq=False)
class TypeHandle:
    """Identity and construction capability for a creatable type.

    Handles compare and hash by identity: two handles with the same name are
    still different types. The name is only a secondary lookup key.

    Attributes:
        type_name: Canonical name of the type. May be empty or
            ``"<unknown>"``, in which case the type cannot be looked up by name.
        object_factory: Callable building a plain object from an instance name.
        component_factory: Callable building a component from an instance name
            and a parent component.
    """

    type_name: str
    object_factory: Optional[ObjectFactory] = None
    component_factory: Optional[ComponentFactory] = None

    def get_type_name(self) -> str:
        return self.type_name

    def create_object(self, name: str = "") -> Any:
        """Build a plain object, or return None if this type cannot build one."""
        if self.object_factory is None:
            return None
        return self.object_factory(name)

    def create_component(self, name: str, parent: Any) -> Any:
        """Build a component, or return None if this type cannot build one."""
        if self.component_factory is None:
            return None
        return self.component_factory(name, parent)

    def __repr__(self):
        return f"TypeHandle({self.type_name!r})"


def class_handle(
    cls: type, type_name: Optional[str] = None, component: bool = False
) -> TypeHandle:
    """Create a :class:`TypeHandle` that constructs instances of a class.

    Args:
        cls: The class to construct.
        type_name: Optional name to register the type under; defaults to the
            class name.
        component: If True the class is built as a component, ``cls(name, parent)``;
            otherwise as a plain object, ``cls(name)``.

    Returns:
        A new handle. Calling this twice for the same class gives two distinct
        types, so callers normally keep the handle they registered.

    Example:
        >>> class Driver:
        ...     def __init__(self, name, parent):
        ...         self.name, self.parent = name, parent
        >>> handle = class_handle(Driver, component=True)
        >>> handle.get_type_name()
        'Driver'
    """
    name = type_name if type_name is not None else cls.__name__
    if component:
        return TypeHandle(name, component_factory=cls)
    return TypeHandle(name, object_factory=cls)


def is_named(type_name: Optional[str]) -> bool:
    """True if a type name can be used as a lookup key."""
    return bool(type_name) and type_name != UNKNOWN_TYPE_NAME


def display_name(type_name: Optional[str]) -> str:
    return type_name if type_name else UNKNOWN_TYPE_NAME


def instance_path(parent_inst_path: str, name: str) -> str:
    """Join a parent instance path and an instance name.

    Example:
        >>> instance_path("env.agent0", "driver0")
        'env.agent0.driver0'
        >>> instance_path("", "driver0")
        'driver0'
        >>> instance_path("env.agent0", "")
        'env.agent0'
    """
    if not parent_inst_path:
        return name
    if not name:
        return parent_inst_path
    return f"{parent_inst_path}.{name}"


@dataclass
class TypePair:
    """One side of an override: a handle, a name, or both.

    The handle is None while the named type has not been registered yet.
    """

    handle: Optional[TypeHandle]
    type_name: str

    @property
    def resolved(self) -> bool:
        return self.handle is not None


@dataclass(eq=False)
class OverrideRecord:
    """A single type or instance override.

    Attributes:
        original: The type being replaced.
        override: The type produced in its place.
        scope: Empty for a global type override, otherwise the instance path
            pattern the override applies to.
        replace: Whether this type override takes precedence over older ones
            for the same original type.
        has_wildcard: Derived from ``scope``; True if it contains ``*`` or ``?``.
        used: Number of times the override was selected during resolution.
        selected: Set only while a trace is being collected.
    """

    original: TypePair
    override: TypePair
    scope: str = ""
    replace: bool = False
    has_wildcard: bool = field(init=False, default=False)
    used: int = 0
    selected: bool = False

    def __post_init__(self):
        self.has_wildcard = has_wildcard(self.scope)

    @property
    def is_instance_override(self) -> bool:
        return self.scope != ""

    def mark_used(self):
        self.used += 1


@dataclass(frozen=True)
class AliasRecord:
    """An alternate name for a registered type.

    Attributes:
        alias_name: The alternate name.
        target: The type the alias stands for.
        scope: Instance path pattern the alias applies to, or None for a global
            alias.
    """

    alias_name: str
    target: TypeHandle
    scope: Optional[str] = None
