"""Exceptions raised by the point stacker."""


class StackingError(RuntimeError):
    """A stacking run failed and produced no result."""


class TransformError(StackingError):
    """A single coordinate could not be mapped between coordinate spaces."""


class ConfigurationError(ValueError):
    """The stacking parameters are invalid or incomplete."""
