"""Deferred imports for optional storage backends."""

from collections.abc import Callable
from importlib import import_module

__all__ = [
    "lazy_import",
]


def lazy_import(
    module_name: str,
    name: str | None = None,
) -> Callable[[], object]:
    """Return a loader that imports a module, or one attribute of it, on call.

    Keeps driver packages such as motor out of the import path until a
    backend is actually constructed.
    """

    def _load() -> object:
        mod = import_module(module_name)
        return getattr(mod, name) if name else mod

    return _load
