from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Final, Literal, TypeAlias

from svcwire.exceptions import SvcWireArgumentError, SvcWireConfigurationError
from svcwire.registry import dotted_path

_DISCRIMINANT_KEYS: Final[tuple[str, ...]] = ("kind", "type")
_CONTAINER_KEYWORD: Final[str] = "container"
_KEYWORD_PARAMETER_KINDS: Final[tuple[Any, ...]] = (
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


class MissingType:
    """Type of the ``MISSING`` sentinel.

    ``MISSING`` marks an absent value where ``None`` is a legitimate value,
    for example an argument position that was never set versus a
    ``ParameterArgument(None)``.
    """

    _instance: ClassVar[MissingType | None] = None

    def __new__(cls) -> MissingType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final[MissingType] = MissingType()


@dataclass(frozen=True, slots=True)
class ServiceArgument:
    """Resolve the argument by asking the container for another service."""

    kind: ClassVar[str] = "service"

    name: str
    """Name of the referenced service."""


@dataclass(frozen=True, slots=True)
class ParameterArgument:
    """Pass a literal value verbatim, falsy values included."""

    kind: ClassVar[str] = "parameter"

    value: Any
    """The literal value."""


@dataclass(frozen=True, slots=True)
class InstanceArgument:
    """Build a fresh instance through the container.

    When ``arguments`` is present the container's parameterized path is used,
    so the target may itself be a registered service with its own definition.
    """

    kind: ClassVar[str] = "instance"

    class_name: str
    """Service or class name passed to ``Container.get``."""
    arguments: tuple[Any, ...] | MissingType = MISSING
    """Raw positional values forwarded to ``Container.get``, if any."""

    def __post_init__(self) -> None:
        if not isinstance(self.arguments, (tuple, MissingType)):
            object.__setattr__(self, "arguments", tuple(self.arguments))


ArgumentSpec: TypeAlias = ServiceArgument | ParameterArgument | InstanceArgument
"""One instruction describing how to obtain a single value during construction."""

ARGUMENT_SPEC_TYPES: Final[tuple[type[Any], ...]] = (
    ServiceArgument,
    ParameterArgument,
    InstanceArgument,
)
ARGUMENT_KINDS: Final[frozenset[str]] = frozenset(spec.kind for spec in ARGUMENT_SPEC_TYPES)


@dataclass(frozen=True, slots=True)
class MethodCall:
    """A setter-injection call applied after construction."""

    method_name: str
    arguments: tuple[ArgumentSpec, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", tuple(self.arguments))


@dataclass(frozen=True, slots=True)
class PropertyAssignment:
    """A property assigned after every method call has completed."""

    name: str
    value: ArgumentSpec


@dataclass(frozen=True, slots=True)
class StructuredDefinition:
    """Class name plus constructor, setter and property wiring instructions.

    Instances are immutable. ``ServiceDescriptor.set_parameter`` swaps in a
    copy with one positional constructor argument replaced.
    """

    class_name: str
    arguments: tuple[ArgumentSpec, ...] = ()
    """Positional constructor arguments."""
    calls: tuple[MethodCall, ...] = ()
    """Method calls, applied in declared order."""
    properties: tuple[PropertyAssignment, ...] = ()
    """Property assignments, applied in declared order after all calls."""

    def __post_init__(self) -> None:
        for attribute in ("arguments", "calls", "properties"):
            object.__setattr__(self, attribute, tuple(getattr(self, attribute)))


@dataclass(frozen=True, slots=True)
class ClassNameDefinition:
    """Construct the class registered (or importable) under ``class_name``.

    A definition made from a class object keeps it in ``constructor``, so the
    class is built even when its dotted path cannot be imported.
    """

    class_name: str
    constructor: type[Any] | None = None


@dataclass(frozen=True, slots=True)
class FactoryDefinition:
    """Call a user factory to produce the service.

    ``pass_container`` decides whether the factory receives the container as
    a ``container=`` keyword argument. ``"infer"`` inspects the factory
    signature for a ``container`` parameter that can be passed by keyword.
    """

    factory: Callable[..., Any]
    pass_container: bool | Literal["infer"] = "infer"

    def __post_init__(self) -> None:
        if self.pass_container == "infer":
            object.__setattr__(self, "pass_container", accepts_container_keyword(self.factory))


@dataclass(frozen=True, slots=True)
class InstanceDefinition:
    """An already resolved value, returned unchanged."""

    instance: Any


ServiceDefinition: TypeAlias = (
    ClassNameDefinition | FactoryDefinition | InstanceDefinition | StructuredDefinition
)
"""The closed set of definition shapes a service can have."""

DEFINITION_TYPES: Final[tuple[type[Any], ...]] = (
    ClassNameDefinition,
    FactoryDefinition,
    InstanceDefinition,
    StructuredDefinition,
)


def accepts_container_keyword(factory: Callable[..., Any]) -> bool:
    """Return true when ``factory`` declares a ``container`` keyword parameter."""
    try:
        parameters = inspect.signature(factory).parameters
    except (TypeError, ValueError):
        return False
    parameter = parameters.get(_CONTAINER_KEYWORD)
    return parameter is not None and parameter.kind in _KEYWORD_PARAMETER_KINDS


def _is_factory(definition: object) -> bool:
    return (
        inspect.isfunction(definition)
        or inspect.ismethod(definition)
        or inspect.isbuiltin(definition)
        or isinstance(definition, functools.partial)
    )


def classify_definition(definition: object) -> ServiceDefinition:
    """Classify a raw service definition into one of the definition variants.

    Args:
        definition: A class name string, a class, a function or partial, a
            structured mapping, an existing definition variant, or any other
            value to be returned as-is.

    Returns:
        The matching definition variant.

    Raises:
        SvcWireConfigurationError: If a mapping definition is malformed.
        SvcWireArgumentError: If an argument inside a mapping is malformed.

    """
    if isinstance(definition, DEFINITION_TYPES):
        return definition  # type: ignore[return-value]
    if isinstance(definition, str):
        return ClassNameDefinition(class_name=definition)
    if isinstance(definition, Mapping):
        return parse_structured_definition(definition)
    if isinstance(definition, type):
        return ClassNameDefinition(class_name=dotted_path(definition), constructor=definition)
    if _is_factory(definition):
        return FactoryDefinition(factory=definition)  # type: ignore[arg-type]
    return InstanceDefinition(instance=definition)


def _is_list(value: object) -> bool:
    return isinstance(value, (list, tuple))


def parse_argument(argument: object, position: int | str = 0) -> ArgumentSpec:
    """Parse one argument given as a mapping, or pass an argument spec through.

    The discriminant is read from ``kind`` (or its alias ``type``). Fields are
    checked by key existence so falsy values such as ``0`` or ``""`` are kept.

    Raises:
        SvcWireArgumentError: On an unknown or missing discriminant, or when
            the field required by the kind is absent.

    """
    if isinstance(argument, ARGUMENT_SPEC_TYPES):
        return argument  # type: ignore[return-value]
    if not isinstance(argument, Mapping):
        msg = f"Argument at position {position} must be a mapping or an argument spec"
        raise SvcWireArgumentError(msg, position)

    kind_key = next((key for key in _DISCRIMINANT_KEYS if key in argument), None)
    if kind_key is None:
        msg = f"Argument at position {position} must have a kind"
        raise SvcWireArgumentError(msg, position)
    kind = argument[kind_key]

    if kind == ServiceArgument.kind:
        if "name" not in argument:
            msg = f"Service 'name' is required in parameter on position {position}"
            raise SvcWireArgumentError(msg, position)
        return ServiceArgument(name=argument["name"])

    if kind == ParameterArgument.kind:
        if "value" not in argument:
            msg = f"Service 'value' is required in parameter on position {position}"
            raise SvcWireArgumentError(msg, position)
        return ParameterArgument(value=argument["value"])

    if kind == InstanceArgument.kind:
        if "className" not in argument:
            msg = f"Service 'className' is required in parameter on position {position}"
            raise SvcWireArgumentError(msg, position)
        if "arguments" not in argument:
            return InstanceArgument(class_name=argument["className"])
        instance_arguments = argument["arguments"]
        if not _is_list(instance_arguments):
            msg = f"Instance arguments must be a list on position {position}"
            raise SvcWireArgumentError(msg, position)
        return InstanceArgument(
            class_name=argument["className"],
            arguments=tuple(instance_arguments),
        )

    msg = f"Unknown argument kind {kind!r} in parameter on position {position}"
    raise SvcWireArgumentError(msg, position)


def parse_arguments(arguments: object, *, context: str = "Constructor") -> tuple[ArgumentSpec, ...]:
    """Parse a list of arguments, keeping their positions."""
    if not _is_list(arguments):
        msg = f"{context} arguments must be a list"
        raise SvcWireConfigurationError(msg)
    return tuple(
        parse_argument(argument, position)
        for position, argument in enumerate(arguments)  # type: ignore[arg-type]
    )


def _parse_calls(calls: object) -> tuple[MethodCall, ...]:
    if not _is_list(calls):
        msg = "Setter injection parameters must be a list"
        raise SvcWireConfigurationError(msg)

    parsed: list[MethodCall] = []
    for position, call in enumerate(calls):  # type: ignore[arg-type]
        if not isinstance(call, Mapping):
            msg = f"Method call must be a mapping on position {position}"
            raise SvcWireConfigurationError(msg)
        if "method" not in call:
            msg = f"The method name is required on position {position}"
            raise SvcWireConfigurationError(msg)
        call_arguments: tuple[ArgumentSpec, ...] = ()
        if "arguments" in call:
            call_arguments = parse_arguments(
                call["arguments"],
                context=f"Call on position {position}:",
            )
        parsed.append(MethodCall(method_name=call["method"], arguments=call_arguments))
    return tuple(parsed)


def _parse_properties(properties: object) -> tuple[PropertyAssignment, ...]:
    if not _is_list(properties):
        msg = "Property injection parameters must be a list"
        raise SvcWireConfigurationError(msg)

    parsed: list[PropertyAssignment] = []
    for position, prop in enumerate(properties):  # type: ignore[arg-type]
        if not isinstance(prop, Mapping):
            msg = f"Property must be a mapping on position {position}"
            raise SvcWireConfigurationError(msg)
        if "name" not in prop:
            msg = f"The property name is required on position {position}"
            raise SvcWireConfigurationError(msg)
        if "value" not in prop:
            msg = f"The property value is required on position {position}"
            raise SvcWireConfigurationError(msg)
        parsed.append(
            PropertyAssignment(name=prop["name"], value=parse_argument(prop["value"], position)),
        )
    return tuple(parsed)


def parse_structured_definition(definition: Mapping[str, Any]) -> StructuredDefinition:
    """Parse a mapping-shaped structured definition.

    Expected keys are ``className`` (required), ``arguments``, ``calls``
    (entries with ``method`` and optional ``arguments``) and ``properties``
    (entries with ``name`` and ``value``).

    Raises:
        SvcWireConfigurationError: If the definition shape is malformed.
        SvcWireArgumentError: If an argument inside it is malformed.

    """
    if "className" not in definition:
        msg = "Invalid service definition. Missing 'className' parameter"
        raise SvcWireConfigurationError(msg)

    return StructuredDefinition(
        class_name=definition["className"],
        arguments=parse_arguments(definition["arguments"]) if "arguments" in definition else (),
        calls=_parse_calls(definition["calls"]) if "calls" in definition else (),
        properties=(
            _parse_properties(definition["properties"]) if "properties" in definition else ()
        ),
    )


def replace_argument(
    arguments: Sequence[ArgumentSpec],
    position: int,
    argument: ArgumentSpec,
) -> tuple[ArgumentSpec, ...]:
    """Return ``arguments`` with ``position`` set to ``argument``.

    Positions past the end extend the sequence, filling any gap with
    ``ParameterArgument(None)``.
    """
    updated = list(arguments)
    if position < len(updated):
        updated[position] = argument
        return tuple(updated)
    updated.extend(ParameterArgument(value=None) for _ in range(position - len(updated)))
    updated.append(argument)
    return tuple(updated)


__all__ = [
    "ARGUMENT_KINDS",
    "ARGUMENT_SPEC_TYPES",
    "DEFINITION_TYPES",
    "MISSING",
    "ArgumentSpec",
    "ClassNameDefinition",
    "FactoryDefinition",
    "InstanceArgument",
    "InstanceDefinition",
    "MethodCall",
    "MissingType",
    "ParameterArgument",
    "PropertyAssignment",
    "ServiceArgument",
    "ServiceDefinition",
    "StructuredDefinition",
    "accepts_container_keyword",
    "classify_definition",
    "parse_argument",
    "parse_arguments",
    "parse_structured_definition",
    "replace_argument",
]
