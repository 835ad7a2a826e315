from __future__ import annotations

import importlib
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar, overload

from svcwire.exceptions import SvcWireServiceResolutionError

C = TypeVar("C", bound=type[Any])

logger = logging.getLogger(__name__)

Constructor = Callable[..., Any]


def dotted_path(cls: type[Any]) -> str:
    """Return the ``module.QualifiedName`` path used as a class's default name."""
    return f"{cls.__module__}.{cls.__qualname__}"


class ClassRegistry:
    """Map class-name strings to constructor callables.

    Explicitly added constructors win. When ``import_paths`` is enabled, a
    name that is a dotted path such as ``"decimal.Decimal"`` is imported on
    first use and remembered.

    Examples:
        .. code-block:: python

            classes = ClassRegistry()
            classes.add("Mailer", Mailer)

            @classes.register
            class Transport: ...

            mailer = classes.create("Mailer", [Transport()])

    """

    def __init__(
        self,
        constructors: Iterable[tuple[str, Constructor]] = (),
        *,
        import_paths: bool = True,
    ) -> None:
        self._constructors: dict[str, Constructor] = dict(constructors)
        self._imported: dict[str, Constructor] = {}
        self.import_paths = import_paths

    def add(self, name: str, constructor: Constructor) -> None:
        """Bind ``name`` to a constructor, replacing any previous binding."""
        self._constructors[name] = constructor
        self._imported.pop(name, None)

    @overload
    def register(self, cls: C, *, name: str | None = None) -> C: ...

    @overload
    def register(self, cls: None = None, *, name: str | None = None) -> Callable[[C], C]: ...

    def register(self, cls: C | None = None, *, name: str | None = None) -> C | Callable[[C], C]:
        """Register a class under ``name`` or its dotted path.

        Works both as a plain call and as a (parametrized) class decorator.
        """

        def decorator(target: C) -> C:
            self.add(name or dotted_path(target), target)
            return target

        if cls is None:
            return decorator
        return decorator(cls)

    def find(self, name: str) -> Constructor | None:
        """Return the constructor for ``name``, or ``None`` when unknown.

        Only classes are picked up from dotted paths, never module functions.

        Raises:
            SvcWireServiceResolutionError: If the module of a dotted path exists
                but fails to import.

        """
        constructor = self._constructors.get(name)
        if constructor is not None:
            return constructor
        constructor = self._imported.get(name)
        if constructor is not None:
            return constructor
        if not self.import_paths:
            return None

        constructor = _import_constructor(name)
        if constructor is not None:
            logger.debug("Imported class %r for the class registry", name)
            self._imported[name] = constructor
        return constructor

    def get(self, name: str) -> Constructor:
        """Return the constructor for ``name``.

        Raises:
            SvcWireServiceResolutionError: If no constructor is known or
                importable under ``name``.

        """
        constructor = self.find(name)
        if constructor is None:
            msg = f"Class {name!r} does not exist in the class registry"
            raise SvcWireServiceResolutionError(name, msg)
        return constructor

    def create(self, name: str, arguments: Iterable[Any] = ()) -> Any:
        """Construct ``name`` with positional ``arguments``."""
        return self.get(name)(*arguments)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find(name) is not None

    def __len__(self) -> int:
        return len(self._constructors)


def _import_constructor(path: str) -> Constructor | None:
    parts = path.split(".")
    if len(parts) < 2 or not all(parts):  # noqa: PLR2004
        return None

    # Longest importable module prefix first, the rest are attribute lookups.
    for split_at in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split_at])
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError as error:
            if not _is_missing_module(error, module_name):
                msg = f"Class {path!r} cannot be imported: {error}"
                raise SvcWireServiceResolutionError(path, msg) from error
            continue
        try:
            for attribute in parts[split_at:]:
                target = getattr(target, attribute)
        except AttributeError:
            return None
        return target if isinstance(target, type) else None
    return None


def _is_missing_module(error: ImportError, module_name: str) -> bool:
    """Return true when ``error`` reports ``module_name`` itself (or a parent) as absent."""
    missing = error.name
    if not isinstance(error, ModuleNotFoundError) or missing is None:
        return False
    return module_name == missing or module_name.startswith(f"{missing}.")


import_only_classes = ClassRegistry()
"""Registry used when construction happens without a container.

It has no explicit entries and only resolves importable dotted paths.
"""

__all__ = ["ClassRegistry", "Constructor", "dotted_path", "import_only_classes"]
