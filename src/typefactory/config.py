from dataclasses import dataclass

__all__ = ["FactoryConfig"]


@dataclass(frozen=True)
class FactoryConfig:
    """Settings for a :class:`~typefactory.factory.Factory`.

    Attributes:
        logger_name: Name of the logger used by the default reporter.
        internal_type_patterns: Patterns (``*`` and ``?`` wildcards) naming
            framework-internal types that ``print(1)`` leaves out of the type
            listing. ``print(2)`` lists every type.
        trace_on_loop: If True, detecting an override loop also emits the
            override trace for the request that looped.
    """

    logger_name: str = "typefactory"
    internal_type_patterns: tuple[str, ...] = ()
    trace_on_loop: bool = True
