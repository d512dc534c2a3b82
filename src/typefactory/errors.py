__all__ = ["FactoryError", "FactoryFatalError"]


class FactoryError(Exception):
    """Base class for errors raised by the type factory."""

    pass


class FactoryFatalError(FactoryError):
    """Raised when a fatal report reaches the default reporter.

    Fatal reports indicate an integration defect, such as registering a null
    type handle, rather than an ordinary misconfiguration.
    """

    def __init__(self, tag: str, message: str):
        super().__init__(f"[{tag}] {message}")
        self.tag = tag
