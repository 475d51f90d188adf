"""Condition coverage for Go packages."""

from gobco._version import __version__  # noqa: F401


def __getattr__(name):
    if name in ("classify", "load"):
        from gobco.report import load
        from gobco.resolver import classify

        return {"classify": classify, "load": load}[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["classify", "load", "__version__"]
