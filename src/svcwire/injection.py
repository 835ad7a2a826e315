from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any, get_args, get_origin, get_type_hints

from svcwire.markers import FromService


@dataclass(frozen=True, slots=True)
class ServiceParameter:
    """A callable parameter filled from a container service."""

    name: str
    marker: FromService


@dataclass(frozen=True, slots=True)
class InjectedCallableInspection:
    """Injection metadata derived from a callable signature and annotations."""

    signature: inspect.Signature
    service_parameters: tuple[ServiceParameter, ...]
    public_signature: inspect.Signature


@dataclass(slots=True)
class InjectedCallableInspector:
    """Inspect callables for ``Annotated[..., FromService(...)]`` parameters."""

    def inspect_callable(self, callable_obj: Callable[..., Any]) -> InjectedCallableInspection:
        """Build injection metadata and a public signature for a callable."""
        signature = inspect.signature(callable_obj)
        service_parameters = self.extract_service_parameters(callable_obj=callable_obj)
        public_signature = self.build_public_signature(
            signature=signature,
            hidden_parameter_names={parameter.name for parameter in service_parameters},
        )
        return InjectedCallableInspection(
            signature=signature,
            service_parameters=service_parameters,
            public_signature=public_signature,
        )

    def extract_service_parameters(
        self,
        *,
        callable_obj: Callable[..., Any],
    ) -> tuple[ServiceParameter, ...]:
        """Extract parameters carrying a ``FromService`` marker."""
        signature = inspect.signature(callable_obj)
        resolved_annotations = self.resolved_annotations(callable_obj=callable_obj)
        service_parameters: list[ServiceParameter] = []
        for parameter in signature.parameters.values():
            annotation = resolved_annotations.get(parameter.name, parameter.annotation)
            marker = self.find_marker(annotation=annotation)
            if marker is None:
                continue
            service_parameters.append(ServiceParameter(name=parameter.name, marker=marker))
        return tuple(service_parameters)

    def resolved_annotations(self, *, callable_obj: Callable[..., Any]) -> dict[str, Any]:
        """Resolve callable annotations with extras, falling back to an empty mapping."""
        try:
            return get_type_hints(callable_obj, include_extras=True)
        except (AttributeError, NameError, TypeError):
            return {}

    def find_marker(self, *, annotation: Any) -> FromService | None:
        """Return the ``FromService`` marker of an ``Annotated`` annotation, if any."""
        if annotation is inspect.Signature.empty or isinstance(annotation, str):
            return None
        if get_origin(annotation) is not Annotated:
            return None
        for item in get_args(annotation)[1:]:
            if isinstance(item, FromService):
                return item
        return None

    def build_public_signature(
        self,
        *,
        signature: inspect.Signature,
        hidden_parameter_names: set[str],
    ) -> inspect.Signature:
        """Build a signature that hides injected parameters."""
        filtered_parameters = [
            parameter
            for parameter in signature.parameters.values()
            if parameter.name not in hidden_parameter_names
        ]
        return signature.replace(parameters=filtered_parameters)


__all__ = [
    "InjectedCallableInspection",
    "InjectedCallableInspector",
    "ServiceParameter",
]
