"""Exceptions raised by ibex."""


class ConfigurationError(ValueError):
    """A run cannot be set up: missing problem, reference set or unknown name.

    Raised at setup time, before any generation runs. The message names the
    problem, reference set or indicator involved.
    """
