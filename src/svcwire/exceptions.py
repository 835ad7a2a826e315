from __future__ import annotations

from collections.abc import Sequence


class SvcWireError(Exception):
    """Represent a base class for all svcwire-specific failures.

    Catch this type when you want to handle any svcwire error path without
    matching each concrete exception class individually.
    """


class SvcWireConfigurationError(SvcWireError):
    """Signal a malformed or incomplete service definition.

    Raised while parsing mapping-shaped definitions, by
    ``InstanceBuilder.build`` when a structured definition cannot be applied,
    and by ``ServiceDescriptor.set_parameter``/``get_parameter`` when the
    service definition is not structured.

    Typical fixes include providing ``className``, passing calls and
    properties as lists of mappings with ``method``/``name``/``value`` keys, and
    only requesting setter or property injection for constructors that return
    real objects.
    """


class SvcWireServiceResolutionError(SvcWireError):
    """Signal that a named service cannot be turned into an instance.

    Raised by ``ServiceDescriptor.resolve`` when no definition branch produces
    a value, for example when a class name is not present in the class
    registry and cannot be imported.
    """

    def __init__(self, service_name: str, message: str | None = None) -> None:
        self.service_name = service_name
        super().__init__(message or f"Service {service_name!r} cannot be resolved")


class SvcWireServiceNotRegisteredError(SvcWireServiceResolutionError):
    """Signal that a name is neither a registered service nor a known class.

    Raised by ``Container.get`` and ``Container.get_service``.

    Typical fixes include registering the service with ``Container.set`` or
    adding the class to ``Container.classes``.
    """

    def __init__(self, service_name: str) -> None:
        super().__init__(
            service_name,
            f"Service {service_name!r} wasn't found in the dependency injection container",
        )


class SvcWireCircularDependencyError(SvcWireServiceResolutionError):
    """Signal that resolving a service requires resolving itself.

    Raised by ``Container.get`` when cycle detection is enabled and a service
    name is already being resolved higher up the call stack.
    """

    def __init__(self, service_name: str, stack: Sequence[str]) -> None:
        self.stack = list(stack)
        chain = " -> ".join([*self.stack, service_name])
        super().__init__(service_name, f"Circular dependency detected: {chain}")


class SvcWireArgumentError(SvcWireError):
    """Signal an invalid argument specification.

    Raised when an argument has an unknown or missing ``kind`` discriminant,
    or lacks the field its kind requires (``name`` for services, ``value``
    for parameters, ``className`` for instances).
    """

    def __init__(self, message: str, position: int | str | None = None) -> None:
        self.position = position
        super().__init__(message)
