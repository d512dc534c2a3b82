"""The factory service.

:class:`Factory` ties together the registry, aliases, overrides, resolver and
tracer behind one re-entrant lock. Every public method holds the lock for its
whole duration, so a factory can be shared between threads.

A process-wide default factory is available through :func:`get_factory`, but
code that needs a factory should normally be handed one explicitly.
"""

import logging
import threading
from functools import wraps
from typing import Any, Callable, Optional

from typefactory.aliases import AliasTable
from typefactory.config import FactoryConfig
from typefactory.domain import TypeHandle, class_handle, instance_path
from typefactory.errors import FactoryError
from typefactory.overrides import OverrideTable
from typefactory.reporting import LoggingReporter, Reporter, Severity
from typefactory.resolver import Resolver
from typefactory.tracer import DebugTracer
from typefactory.type_registry import TypeLoader, TypeRegistry

__all__ = ["Factory", "get_factory", "set_factory", "handle_of"]

HANDLE_ATTRIBUTE = "__type_handle__"


def _synchronized(method: Callable) -> Callable:
    @wraps(method)
    def locked(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return locked


class Factory:
    """Registry of creatable types with type and instance overrides.

    Args:
        config: Factory settings; defaults to :class:`FactoryConfig()`.
        reporter: Receiver for warnings, errors and diagnostic dumps. Defaults
            to a :class:`LoggingReporter` on ``config.logger_name``.

    Example:
        >>> factory = Factory()
        >>> @factory.registers(component=True)
        ... class Driver:
        ...     def __init__(self, name, parent):
        ...         self.name, self.parent = name, parent
        >>> @factory.registers(component=True)
        ... class FastDriver(Driver):
        ...     pass
        >>> factory.set_inst_override_by_type(
        ...     handle_of(Driver), handle_of(FastDriver), "env.agent0.*"
        ... )
        >>> driver = factory.create_component_by_name("Driver", "env.agent0", "driver", None)
        >>> isinstance(driver, FastDriver)
        True
    """

    def __init__(
        self, config: Optional[FactoryConfig] = None, reporter: Optional[Reporter] = None
    ):
        self.config = config or FactoryConfig()
        self._reporter = reporter or LoggingReporter(logging.getLogger(self.config.logger_name))
        self._lock = threading.RLock()
        self._registry = TypeRegistry(self._reporter)
        self._aliases = AliasTable(self._registry, self._reporter)
        self._overrides = OverrideTable(self._registry, self._aliases, self._reporter)
        self._resolver = Resolver(self._aliases, self._overrides, self._reporter)
        self._tracer = DebugTracer(
            self._registry,
            self._overrides,
            self._resolver,
            self._reporter,
            self.config.internal_type_patterns,
        )
        if self.config.trace_on_loop:
            self._resolver.on_loop = self._trace_loop

    @property
    def reporter(self) -> Reporter:
        return self._reporter

    @_synchronized
    def register(self, handle: TypeHandle):
        """Register a type so it can be created and overridden by name."""
        self._registry.register(handle)

    @_synchronized
    def declare(self, type_name: str, loader: TypeLoader):
        """Declare a type that is only registered when its name is first looked up.

        Args:
            type_name: Name of the type.
            loader: Zero-argument callable returning the type's handle. The
                handle must carry ``type_name``; a mismatch is fatal.
        """
        self._registry.declare(type_name, loader)

    def registers(
        self, type_name: Optional[str] = None, component: bool = False
    ) -> Callable[[type], type]:
        """Class decorator registering the class as a creatable type.

        Args:
            type_name: Optional name; defaults to the class name.
            component: Register a component type, built as ``cls(name, parent)``,
                rather than a plain object type built as ``cls(name)``.

        Returns:
            A decorator returning the class unchanged apart from the attached
            handle, which :func:`handle_of` retrieves.

        Example:
            @factory.registers(component=True)
            class Monitor:
                def __init__(self, name, parent):
                    ...
        """

        def decorator(cls: type) -> type:
            handle = class_handle(cls, type_name, component)
            setattr(cls, HANDLE_ATTRIBUTE, handle)
            self.register(handle)
            return cls

        return decorator

    @_synchronized
    def is_type_registered(self, handle: TypeHandle) -> bool:
        return self._registry.is_type_registered(handle)

    @_synchronized
    def is_type_name_registered(self, type_name: str) -> bool:
        return self._registry.is_type_name_registered(type_name)

    @_synchronized
    def find_type_by_name(self, type_name: str) -> Optional[TypeHandle]:
        """Look up a registered type (or global alias) by name, ignoring overrides."""
        handle = self._registry.lookup(type_name)
        if handle is None:
            self._reporter.report(
                "UnknownTypeName",
                f"find_type_by_name: Type name '{type_name}' not registered with the factory.",
                Severity.WARNING,
            )
        return handle

    @_synchronized
    def set_type_override_by_type(
        self, original: TypeHandle, override: TypeHandle, replace: bool = True
    ):
        """Build ``override`` wherever ``original`` is requested.

        Args:
            original: The type to replace.
            override: The type to build instead.
            replace: If an override of ``original`` already exists, replace it.
                Otherwise the existing override is kept.
        """
        self._overrides.set_type_override_by_type(original, override, replace)

    @_synchronized
    def set_type_override_by_name(
        self, original_name: str, override_name: str, replace: bool = True
    ):
        """Like :meth:`set_type_override_by_type`, naming the types.

        The names need not be registered yet.
        """
        self._overrides.set_type_override_by_name(original_name, override_name, replace)

    @_synchronized
    def set_inst_override_by_type(
        self, original: TypeHandle, override: TypeHandle, full_inst_path: str
    ):
        """Build ``override`` when ``original`` is requested under matching paths.

        Args:
            original: The type to replace.
            override: The type to build instead.
            full_inst_path: Instance path, or pattern with ``*`` and ``?``
                wildcards. The first declared matching override wins, so declare
                more specific paths first.
        """
        self._overrides.set_inst_override_by_type(original, override, full_inst_path)

    @_synchronized
    def set_inst_override_by_name(
        self, original_name: str, override_name: str, full_inst_path: str
    ):
        self._overrides.set_inst_override_by_name(original_name, override_name, full_inst_path)

    @_synchronized
    def set_type_alias(self, alias_name: str, original: TypeHandle):
        """Make ``alias_name`` another name for the registered type ``original``."""
        self._aliases.set_type_alias(alias_name, original)

    @_synchronized
    def set_inst_alias(self, alias_name: str, original: TypeHandle, full_inst_path: str):
        """Make ``alias_name`` a name for ``original`` under matching paths only."""
        self._aliases.set_inst_alias(alias_name, original, full_inst_path)

    @_synchronized
    def find_override_by_type(
        self, requested: TypeHandle, full_inst_path: str = ""
    ) -> Optional[TypeHandle]:
        return self._resolver.find_override_by_type(requested, full_inst_path)

    @_synchronized
    def find_override_by_name(
        self, requested_name: str, full_inst_path: str = ""
    ) -> Optional[TypeHandle]:
        """Find the override for a type name.

        Returns:
            The type to build, or None if no override applies. None does not mean
            the name is unknown; see :meth:`create_object_by_name`.
        """
        return self._resolver.find_override_by_name(requested_name, full_inst_path)

    @_synchronized
    def create_object_by_type(
        self, requested: TypeHandle, parent_inst_path: str = "", name: str = ""
    ) -> Any:
        handle = self._resolver.find_override_by_type(
            requested, instance_path(parent_inst_path, name)
        )
        return handle.create_object(name) if handle is not None else None

    @_synchronized
    def create_component_by_type(
        self, requested: TypeHandle, parent_inst_path: str, name: str, parent: Any
    ) -> Any:
        handle = self._resolver.find_override_by_type(
            requested, instance_path(parent_inst_path, name)
        )
        return handle.create_component(name, parent) if handle is not None else None

    @_synchronized
    def create_object_by_name(
        self, requested_name: str, parent_inst_path: str = "", name: str = ""
    ) -> Any:
        """Create an object of the named type, or of its override.

        Returns:
            The new object, or None (with a warning) if the name is unknown.
        """
        handle = self._resolve_for_creation(
            requested_name, instance_path(parent_inst_path, name), "an object"
        )
        return handle.create_object(name) if handle is not None else None

    @_synchronized
    def create_component_by_name(
        self, requested_name: str, parent_inst_path: str, name: str, parent: Any
    ) -> Any:
        handle = self._resolve_for_creation(
            requested_name, instance_path(parent_inst_path, name), "a component"
        )
        return handle.create_component(name, parent) if handle is not None else None

    @_synchronized
    def debug_create_by_type(
        self, requested: TypeHandle, parent_inst_path: str = "", name: str = ""
    ):
        """Report which overrides a request by type would consider and select."""
        self._tracer.debug_create_by_type(requested, instance_path(parent_inst_path, name))

    @_synchronized
    def debug_create_by_name(
        self, requested_name: str, parent_inst_path: str = "", name: str = ""
    ):
        self._tracer.debug_create_by_name(requested_name, instance_path(parent_inst_path, name))

    @_synchronized
    def print(self, all_types: int = 1):
        """Report the registered overrides and, for ``all_types >= 1``, the types."""
        self._tracer.print(all_types)

    @property
    def tracer(self) -> DebugTracer:
        return self._tracer

    def _resolve_for_creation(
        self, requested_name: str, path: str, what: str
    ) -> Optional[TypeHandle]:
        handle = self._resolver.find_override_by_name(requested_name, path)
        if handle is None:
            handle = self._aliases.resolve(requested_name, path)
        if handle is None:
            self._reporter.report(
                "BDTYP",
                f"Cannot create {what} of type '{requested_name}' "
                "because it is not registered with the factory.",
                Severity.WARNING,
            )
        return handle

    def _trace_loop(self, requested: Optional[TypeHandle], requested_name: str, path: str):
        if requested is not None:
            self._tracer.debug_create_by_type(requested, path)
        else:
            self._tracer.debug_create_by_name(requested_name, path)


def handle_of(cls: type) -> TypeHandle:
    """Return the handle a class was registered with by :meth:`Factory.registers`.

    Raises:
        FactoryError: If the class itself was not registered with the decorator.
    """
    handle = cls.__dict__.get(HANDLE_ATTRIBUTE)
    if handle is None:
        raise FactoryError(f"{cls.__name__} was not registered with a factory")
    return handle


_default_factory: Optional[Factory] = None
_default_lock = threading.Lock()


def get_factory() -> Factory:
    """Return the process-wide default factory, creating it on first use."""
    global _default_factory
    with _default_lock:
        if _default_factory is None:
            _default_factory = Factory()
        return _default_factory


def set_factory(factory: Factory):
    """Replace the process-wide default factory."""
    global _default_factory
    with _default_lock:
        _default_factory = factory
