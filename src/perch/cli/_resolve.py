"""Locate the App named on the ``perch run`` command line."""

import importlib

from perch.app import App


def resolve_app(target: str) -> App:
    """Import ``module[:name]`` and return the perch App it names.

    ``name`` defaults to ``app``, so ``perch run blog`` serves
    ``blog.app``. A callable that is not an App is treated as a factory
    and called with no arguments.

    Raises:
        ModuleNotFoundError: The module does not import.
        AttributeError: The module has no such name.
        TypeError: The name (or the factory's result) is not an App.
    """
    module_name, _, name = target.partition(":")
    obj = getattr(importlib.import_module(module_name), name or "app")

    if not isinstance(obj, App) and callable(obj):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"App factory {target!r} failed: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{target!r} is a {type(obj).__name__}, not a perch.App instance"
        raise TypeError(msg)
    return obj
