from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from svcwire.registry import ClassRegistry


class IContainer(ABC):
    """Interface the builder and argument resolver call back into.

    Any registry that can resolve a service name (optionally with positional
    parameters) and exposes a class registry can drive construction.
    """

    @property
    @abstractmethod
    def classes(self) -> ClassRegistry:
        """Registry used to construct classes named by strings."""

    @abstractmethod
    def get(self, name: str, parameters: Sequence[Any] | None = None) -> Any:
        """Resolve the service registered under ``name``.

        Args:
            name: Service name, or a class name known to ``classes``.
            parameters: Positional arguments overriding the definition's own
                constructor arguments.

        Raises:
            SvcWireServiceResolutionError: If the name is unknown or its
                definition cannot be resolved.

        """
