from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from svcwire.definitions import (
    ArgumentSpec,
    InstanceArgument,
    ParameterArgument,
    ServiceArgument,
    parse_argument,
)
from svcwire.exceptions import SvcWireArgumentError, SvcWireConfigurationError

if TYPE_CHECKING:
    from svcwire.container_interface import IContainer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ArgumentResolver:
    """Turn argument specs into concrete values.

    Literal parameters are returned verbatim. Service and instance references
    are delegated to the container, which may recurse back into the builder.
    """

    def resolve(
        self,
        spec: ArgumentSpec | Mapping[str, Any],
        container: IContainer | None = None,
        position: int | str = 0,
    ) -> Any:
        """Resolve one argument spec to a value.

        Args:
            spec: An argument spec, or a mapping with a ``kind`` key that is
                parsed into one.
            container: Container consulted for service and instance references.
            position: Position of the argument, used in error messages.

        Returns:
            The resolved value.

        Raises:
            SvcWireArgumentError: If the spec has an unknown or missing kind,
                or misses the field its kind requires.
            SvcWireConfigurationError: If a service or instance reference is
                resolved without a container.

        """
        argument = parse_argument(spec, position)
        logger.debug("Resolving %s argument on position %s", argument.kind, position)

        if isinstance(argument, ParameterArgument):
            return argument.value

        if isinstance(argument, ServiceArgument):
            return _require_container(container, position).get(argument.name)

        if isinstance(argument, InstanceArgument):
            target = _require_container(container, position)
            if isinstance(argument.arguments, tuple):
                return target.get(argument.class_name, argument.arguments)
            return target.get(argument.class_name)

        msg = f"Unknown argument kind in parameter on position {position}"
        raise SvcWireArgumentError(msg, position)

    def resolve_all(
        self,
        specs: Iterable[ArgumentSpec | Mapping[str, Any]],
        container: IContainer | None = None,
    ) -> list[Any]:
        """Resolve specs in order into a positional argument list."""
        return [
            self.resolve(spec, container, position) for position, spec in enumerate(specs)
        ]


def _require_container(container: IContainer | None, position: int | str) -> IContainer:
    if container is None:
        msg = (
            "A container is required to resolve a service reference "
            f"in parameter on position {position}"
        )
        raise SvcWireConfigurationError(msg)
    return container


__all__ = ["ArgumentResolver"]
