"""Exceptions shared by all gobco components."""


class GobcoError(RuntimeError):
    """A fatal error: the run cannot continue."""


class UsageError(GobcoError):
    """The command line or the given path cannot be used."""
