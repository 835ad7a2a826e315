from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from svcwire.builder import InstanceBuilder
from svcwire.definitions import (
    MISSING,
    ArgumentSpec,
    ClassNameDefinition,
    FactoryDefinition,
    InstanceDefinition,
    MissingType,
    ServiceDefinition,
    StructuredDefinition,
    classify_definition,
    parse_argument,
    replace_argument,
)
from svcwire.exceptions import SvcWireConfigurationError, SvcWireServiceResolutionError
from svcwire.registry import Constructor, import_only_classes

if TYPE_CHECKING:
    from typing_extensions import Self

    from svcwire.container_interface import IContainer

logger = logging.getLogger(__name__)

_STATE_ATTRIBUTES = ("name", "definition", "shared")


class ServiceDescriptor:
    """Represent one named service: its definition, shared flag and cache.

    The raw definition is classified once, when it is set, into a class name,
    a factory, a literal instance or a structured definition.

    Examples:
        .. code-block:: python

            service = ServiceDescriptor("request", "app.http.Request")
            request = service.resolve()

            mailer = ServiceDescriptor(
                "mailer",
                {
                    "className": "app.Mailer",
                    "arguments": [{"kind": "service", "name": "transport"}],
                },
                shared=True,
            )
            mailer.resolve(container=container)

    """

    def __init__(
        self,
        name: str,
        definition: object,
        *,
        shared: bool = False,
        builder: InstanceBuilder | None = None,
    ) -> None:
        self._name = name
        self._definition: ServiceDefinition = classify_definition(definition)
        self._shared = shared
        self._resolved = False
        self._shared_instance: Any = MISSING
        self._builder = builder or InstanceBuilder()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, "
            f"definition={self._definition!r}, shared={self._shared!r})"
        )

    @property
    def name(self) -> str:
        """The service's name."""
        return self._name

    @property
    def definition(self) -> ServiceDefinition:
        """The classified service definition."""
        return self._definition

    def set_definition(self, definition: object) -> None:
        """Replace the definition and drop any cached shared instance."""
        self._definition = classify_definition(definition)
        self._shared_instance = MISSING
        self._resolved = False

    @property
    def shared(self) -> bool:
        return self._shared

    def set_shared(self, shared: bool) -> None:  # noqa: FBT001
        """Set whether the service is shared.

        Turning sharing off drops the cached instance so the cache is only
        ever populated for shared services.
        """
        self._shared = shared
        if not shared:
            self._shared_instance = MISSING

    @property
    def shared_instance(self) -> Any:
        """The cached shared instance, or ``MISSING``."""
        return self._shared_instance

    def set_shared_instance(self, shared_instance: Any) -> None:
        """Seed or reset (with ``MISSING``) the cached shared instance."""
        self._shared_instance = shared_instance

    @property
    def is_resolved(self) -> bool:
        """Whether the service was resolved at least once."""
        return self._resolved

    def resolve(
        self,
        parameters: Sequence[Any] | None = None,
        container: IContainer | None = None,
    ) -> Any:
        """Resolve the service into an instance.

        Args:
            parameters: Positional constructor/factory arguments. For
                structured definitions they replace the declared constructor
                arguments entirely.
            container: Container used for service references, for the class
                registry, and passed to factories that accept ``container``.

        Returns:
            The cached instance for a resolved shared service, otherwise a
            freshly built one.

        Raises:
            SvcWireServiceResolutionError: If the definition cannot produce
                an instance.

        """
        if self._shared and not isinstance(self._shared_instance, MissingType):
            logger.debug("Returning shared instance of service %r", self._name)
            return self._shared_instance

        definition = self._definition
        if isinstance(definition, ClassNameDefinition):
            instance = self._construct_class(definition, parameters, container)
        elif isinstance(definition, FactoryDefinition):
            instance = _call_factory(definition, parameters, container)
        elif isinstance(definition, InstanceDefinition):
            instance = definition.instance
        elif isinstance(definition, StructuredDefinition):
            instance = self._builder.build(definition, container, parameters)
        else:
            raise SvcWireServiceResolutionError(self._name)

        if self._shared:
            self._shared_instance = instance
        self._resolved = True
        return instance

    def _construct_class(
        self,
        definition: ClassNameDefinition,
        parameters: Sequence[Any] | None,
        container: IContainer | None,
    ) -> Any:
        class_name = definition.class_name
        constructor: Constructor | None = definition.constructor
        if constructor is None:
            classes = container.classes if container is not None else import_only_classes
            constructor = classes.find(class_name)
        if constructor is None:
            raise SvcWireServiceResolutionError(self._name)
        logger.debug("Constructing %r for service %r", class_name, self._name)
        if parameters:
            return constructor(*parameters)
        return constructor()

    def set_parameter(
        self,
        position: int,
        parameter: ArgumentSpec | Mapping[str, Any],
    ) -> Self:
        """Change one constructor argument without resolving the service.

        A position past the end extends the argument list; skipped positions
        are filled with ``ParameterArgument(None)``.

        Raises:
            SvcWireConfigurationError: If the definition is not structured,
                or ``position`` is negative.
            SvcWireArgumentError: If ``parameter`` is a malformed mapping.

        """
        definition = self._require_structured(
            "Definition must be structured to update its parameters",
        )
        if position < 0:
            msg = f"Parameter position must not be negative, got {position}"
            raise SvcWireConfigurationError(msg)

        argument = parse_argument(parameter, position)
        self._definition = StructuredDefinition(
            class_name=definition.class_name,
            arguments=replace_argument(definition.arguments, position, argument),
            calls=definition.calls,
            properties=definition.properties,
        )
        return self

    def get_parameter(self, position: int) -> ArgumentSpec | MissingType:
        """Return the constructor argument at ``position``, or ``MISSING``.

        Raises:
            SvcWireConfigurationError: If the definition is not structured.

        """
        definition = self._require_structured(
            "Definition must be structured to obtain its parameters",
        )
        if 0 <= position < len(definition.arguments):
            return definition.arguments[position]
        return MISSING

    def _require_structured(self, message: str) -> StructuredDefinition:
        if not isinstance(self._definition, StructuredDefinition):
            raise SvcWireConfigurationError(message)
        return self._definition

    @classmethod
    def from_state(cls, attributes: Mapping[str, Any]) -> Self:
        """Restore a service from a mapping of its public attributes.

        Raises:
            SvcWireConfigurationError: If ``name``, ``definition`` or
                ``shared`` is missing.

        """
        for attribute in _STATE_ATTRIBUTES:
            if attribute not in attributes:
                msg = f"The attribute {attribute!r} is required"
                raise SvcWireConfigurationError(msg)
        return cls(
            attributes["name"],
            attributes["definition"],
            shared=bool(attributes["shared"]),
        )


def _call_factory(
    definition: FactoryDefinition,
    parameters: Sequence[Any] | None,
    container: IContainer | None,
) -> Any:
    arguments = list(parameters) if parameters is not None else []
    if definition.pass_container:
        return definition.factory(*arguments, container=container)
    return definition.factory(*arguments)


__all__ = ["ServiceDescriptor"]
