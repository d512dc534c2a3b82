"""Identity and name bookkeeping for creatable types.

The registry keeps two views of the registered types: the set of handles, and
a table from names to handles. A handle with no usable name (empty or
``"<unknown>"``) is still registered, it just cannot be found by name.

Types can also be declared lazily: :meth:`TypeRegistry.declare` records a
loader for a name, and the loader runs the first time the name is looked up.
"""

from typing import Callable, Iterator, Optional

from typefactory.domain import TypeHandle, is_named
from typefactory.reporting import Reporter, Severity

__all__ = ["TypeRegistry", "TypeLoader", "BindingListener"]

TypeLoader = Callable[[], Optional[TypeHandle]]
"""Zero-argument callable producing the handle for a lazily declared name."""

BindingListener = Callable[[str, TypeHandle], None]
"""Called whenever a name becomes bound to a handle."""


class TypeRegistry:
    """Registry of creatable types, indexed by identity and by name."""

    def __init__(self, reporter: Reporter):
        self._reporter = reporter
        self._types: dict[TypeHandle, None] = {}
        self._type_names: dict[str, TypeHandle] = {}
        self._loaders: dict[str, TypeLoader] = {}
        self._lookup_strings: set[str] = set()
        self._listeners: list[BindingListener] = []

    def add_binding_listener(self, listener: BindingListener):
        """Subscribe to name bindings.

        Listeners are told about every newly registered named type and every
        global alias, so that records which only knew a type by name can pick
        up its handle.
        """
        self._listeners.append(listener)

    def register(self, handle: Optional[TypeHandle]):
        """Register a type handle.

        Registering the same handle twice, or a second handle under a name that
        is already taken, is reported as a warning. The first handle bound to a
        name keeps it.

        Args:
            handle: The handle to register. Must not be None.
        """
        if handle is None:
            self._reporter.report(
                "NULLWR",
                "Attempting to register a null type handle with the factory",
                Severity.FATAL,
            )
            return

        type_name = handle.get_type_name()
        named = is_named(type_name)
        bound_here = False

        if named:
            bound = self._type_names.get(type_name)
            if bound is not None and bound is not handle:
                self._reporter.report(
                    "TPRGED",
                    f"Type name '{type_name}' already registered with factory. "
                    "No string-based lookup support for multiple types with the same type name.",
                    Severity.WARNING,
                )
            elif bound is None:
                self._type_names[type_name] = handle
                self._loaders.pop(type_name, None)
                bound_here = True

        if handle in self._types:
            if named:
                self._reporter.report(
                    "TPRGED",
                    f"Object type '{type_name}' already registered with factory.",
                    Severity.WARNING,
                )
            return

        self._types[handle] = None
        if bound_here:
            self._notify(type_name, handle)

    def declare(self, type_name: str, loader: TypeLoader):
        """Declare a type that registers itself on first lookup by name.

        Args:
            type_name: The name the loader's handle must carry.
            loader: Callable returning the handle. It is called at most once.
        """
        if type_name in self._type_names:
            return
        self._loaders[type_name] = loader

    def bind_name(self, type_name: str, handle: TypeHandle) -> bool:
        """Bind an extra name, such as a global alias, to a registered handle.

        Returns:
            True if the name was free and is now bound.
        """
        if type_name in self._type_names:
            return False
        self._type_names[type_name] = handle
        self._loaders.pop(type_name, None)
        self._notify(type_name, handle)
        return True

    def lookup(self, type_name: str) -> Optional[TypeHandle]:
        """Find the handle bound to a name, loading a declared type if needed."""
        handle = self._type_names.get(type_name)
        if handle is None and is_named(type_name):
            handle = self._load(type_name)
        return handle

    def is_type_registered(self, handle: Optional[TypeHandle]) -> bool:
        return handle is not None and handle in self._types

    def is_type_name_registered(self, type_name: str) -> bool:
        return self.lookup(type_name) is not None

    def add_lookup_string(self, type_name: str):
        """Remember a name used in an override before its type was known."""
        self._lookup_strings.add(type_name)

    def is_lookup_string(self, type_name: str) -> bool:
        return type_name in self._lookup_strings

    def registered_types(self) -> list[TypeHandle]:
        """All registered handles, in registration order."""
        return list(self._types)

    def type_names(self) -> Iterator[tuple[str, TypeHandle]]:
        """Name bindings in the order they were made, aliases included."""
        return iter(list(self._type_names.items()))

    def _load(self, type_name: str) -> Optional[TypeHandle]:
        loader = self._loaders.pop(type_name, None)
        if loader is None:
            return None

        handle = loader()
        if handle is None:
            return None
        if handle.get_type_name() != type_name:
            self._reporter.report(
                "LAZYNM",
                f"Type requested as '{type_name}' registered itself "
                f"with the wrong type name '{handle.get_type_name()}'",
                Severity.FATAL,
            )
            return None

        if handle not in self._types:
            self.register(handle)
        return self._type_names.get(type_name)

    def _notify(self, type_name: str, handle: TypeHandle):
        for listener in self._listeners:
            listener(type_name, handle)
