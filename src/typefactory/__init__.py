"""Typefactory: a creation registry with type and instance overrides.

Typefactory decides which concrete type to build when some part of a larger
system asks for an object by type or by name. Tests and configurations can
substitute types globally, or only under particular instance paths, without
the requesting code knowing about it.

Key Features:
    - Types registered eagerly, by class decorator, or lazily on first lookup
    - Global type overrides with replace semantics and override chaining
    - Instance overrides scoped by ``*`` / ``?`` path patterns
    - Global and instance-scoped type aliases
    - Loop detection that reports and breaks override cycles
    - Override traces explaining every decision

Basic Usage:
    >>> from typefactory.factory import Factory, handle_of
    >>>
    >>> factory = Factory()
    >>>
    >>> @factory.registers(component=True)
    ... class Driver:
    ...     def __init__(self, name, parent): ...
    >>>
    >>> @factory.registers(component=True)
    ... class ErrorInjectingDriver(Driver): ...
    >>>
    >>> factory.set_inst_override_by_name("Driver", "ErrorInjectingDriver", "env.agent0.*")
    >>> driver = factory.create_component_by_name("Driver", "env.agent0", "driver", None)

The package consists of several modules:
    - factory: The locked factory service and the default instance
    - type_registry: Type registration, by identity and by name
    - aliases: Global and instance-scoped aliases
    - overrides: Type and instance override tables
    - resolver: Override resolution and loop detection
    - tracer: Override traces and configuration dumps
    - domain: Core domain models (TypeHandle, OverrideRecord, AliasRecord)
    - matching: Instance path patterns
    - config: Factory settings
    - reporting: Severity levels and the logging reporter
    - errors: Framework-specific exceptions
"""
