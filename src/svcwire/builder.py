from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from svcwire.arguments import ArgumentResolver
from svcwire.definitions import (
    MethodCall,
    PropertyAssignment,
    StructuredDefinition,
    parse_structured_definition,
)
from svcwire.exceptions import SvcWireConfigurationError
from svcwire.registry import import_only_classes

if TYPE_CHECKING:
    from svcwire.container_interface import IContainer

logger = logging.getLogger(__name__)

_SCALAR_TYPES: Final[tuple[type[Any], ...]] = (
    type(None),
    bool,
    int,
    float,
    complex,
    str,
    bytes,
)


@dataclass(slots=True)
class InstanceBuilder:
    """Build instances from structured definitions.

    Construction always runs in three phases: the constructor is called with
    the resolved positional arguments, then every method call runs in declared
    order, then every property is assigned in declared order. Calls can
    therefore rely on collaborators that are not yet exposed as properties.
    """

    argument_resolver: ArgumentResolver = field(default_factory=ArgumentResolver)

    def build(
        self,
        definition: StructuredDefinition | Mapping[str, Any],
        container: IContainer | None = None,
        parameters: Sequence[Any] | None = None,
    ) -> Any:
        """Build a fully wired instance.

        Args:
            definition: Structured definition, or its mapping form with
                ``className``/``arguments``/``calls``/``properties`` keys.
            container: Container used for service references and as the
                source of the class registry. Without one, only importable
                dotted class paths can be constructed.
            parameters: Positional constructor arguments that replace the
                definition's own arguments. Method calls and properties are
                still applied.

        Returns:
            The constructed and configured instance.

        Raises:
            SvcWireConfigurationError: If the class name is missing, or calls
                or properties cannot be applied to the constructed value.
            SvcWireServiceResolutionError: If the class name is unknown.
            SvcWireArgumentError: If an argument spec is malformed.

        """
        if isinstance(definition, Mapping):
            definition = parse_structured_definition(definition)

        class_name = definition.class_name
        if not class_name:
            msg = "Invalid service definition. Missing 'className' parameter"
            raise SvcWireConfigurationError(msg)

        classes = container.classes if container is not None else import_only_classes
        constructor = classes.get(class_name)

        if parameters is not None:
            arguments = list(parameters)
        else:
            arguments = self.argument_resolver.resolve_all(definition.arguments, container)

        logger.debug("Constructing %r with %d argument(s)", class_name, len(arguments))
        instance = constructor(*arguments)

        if definition.calls:
            _require_object(instance, "setter injection parameters")
            self._apply_calls(instance, definition.calls, container)

        if definition.properties:
            _require_object(instance, "properties injection parameters")
            self._apply_properties(instance, definition.properties, container)

        return instance

    def _apply_calls(
        self,
        instance: object,
        calls: Sequence[MethodCall],
        container: IContainer | None,
    ) -> None:
        for position, call in enumerate(calls):
            if not call.method_name:
                msg = f"The method name is required on position {position}"
                raise SvcWireConfigurationError(msg)

            method = getattr(instance, call.method_name, None)
            if not callable(method):
                msg = (
                    f"Method {call.method_name!r} on position {position} is not callable "
                    f"on {type(instance).__qualname__}"
                )
                raise SvcWireConfigurationError(msg)

            arguments = self.argument_resolver.resolve_all(call.arguments, container)
            logger.debug(
                "Calling %s.%s with %d argument(s)",
                type(instance).__qualname__,
                call.method_name,
                len(arguments),
            )
            method(*arguments)

    def _apply_properties(
        self,
        instance: object,
        properties: Sequence[PropertyAssignment],
        container: IContainer | None,
    ) -> None:
        for position, prop in enumerate(properties):
            if not prop.name:
                msg = f"The property name is required on position {position}"
                raise SvcWireConfigurationError(msg)

            value = self.argument_resolver.resolve(prop.value, container, position)
            logger.debug("Assigning %s.%s", type(instance).__qualname__, prop.name)
            try:
                setattr(instance, prop.name, value)
            except (AttributeError, TypeError) as error:
                msg = (
                    f"Property {prop.name!r} on position {position} cannot be assigned "
                    f"on {type(instance).__qualname__}"
                )
                raise SvcWireConfigurationError(msg) from error


def _require_object(instance: object, what: str) -> None:
    if isinstance(instance, _SCALAR_TYPES):
        msg = f"The definition has {what} but the constructor didn't return an instance"
        raise SvcWireConfigurationError(msg)


__all__ = ["InstanceBuilder"]
