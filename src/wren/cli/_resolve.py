"""App import resolution — resolves ``"module:attribute"`` strings to Applications."""

import importlib

from wren.app import Application


def resolve_app(import_string: str) -> Application:
    """Resolve an import string to a wren Application.

    Accepts ``"module:attribute"``. When the attribute is omitted it
    defaults to ``"app"``. A callable that is not an Application is
    treated as a factory and called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not an Application.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, Application):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Application):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a wren.Application"
        raise TypeError(msg)

    return obj
