from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from contextlib import AbstractContextManager, nullcontext
from types import MappingProxyType
from typing import Any, TypeVar, cast

from svcwire.builder import InstanceBuilder
from svcwire.container_interface import IContainer
from svcwire.definitions import MISSING
from svcwire.exceptions import SvcWireServiceNotRegisteredError
from svcwire.injection import InjectedCallableInspector
from svcwire.lock_mode import LockMode
from svcwire.registry import ClassRegistry
from svcwire.resolution_stack import resolving
from svcwire.service import ServiceDescriptor

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)
_INJECTED_CALLABLE_INSPECTOR = InjectedCallableInspector()


class Container(IContainer):
    """Register named services and resolve them into wired object graphs.

    Services are registered under string names with one of four definition
    shapes: a class name string (or a class), a factory function, a literal
    instance, or a structured definition describing constructor arguments,
    method calls and property assignments.

    Names that are not registered services fall back to the class registry,
    so structured definitions can reference plain classes by name.

    Examples:
        .. code-block:: python

            container = Container()
            container.classes.add("Mailer", Mailer)
            container.set_shared("transport", SmtpTransport)
            container.set(
                "mailer",
                {
                    "className": "Mailer",
                    "arguments": [{"kind": "service", "name": "transport"}],
                },
            )

            mailer = container.get("mailer")

    """

    def __init__(
        self,
        *,
        classes: ClassRegistry | None = None,
        import_classes: bool = True,
        detect_cycles: bool = True,
        lock_mode: LockMode = LockMode.THREAD,
        builder: InstanceBuilder | None = None,
    ) -> None:
        """Initialize an empty container.

        Args:
            classes: Class registry used to construct classes named by strings.
                A new registry is created when omitted.
            import_classes: Whether a newly created registry may import dotted
                class paths such as ``"decimal.Decimal"``. Ignored when
                ``classes`` is given.
            detect_cycles: Raise ``SvcWireCircularDependencyError`` when a
                service requires itself instead of recursing without bound.
            lock_mode: ``LockMode.THREAD`` serializes resolution so shared
                services are built once across threads. ``LockMode.NONE``
                skips locking.
            builder: Instance builder shared by every registered service.

        """
        self._classes = (
            classes if classes is not None else ClassRegistry(import_paths=import_classes)
        )
        self._detect_cycles = detect_cycles
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if lock_mode is LockMode.THREAD else nullcontext()
        )
        self._builder = builder or InstanceBuilder()
        self._services: dict[str, ServiceDescriptor] = {}
        self._shared_instances: dict[str, Any] = {}

    @property
    def classes(self) -> ClassRegistry:
        return self._classes

    @property
    def services(self) -> Mapping[str, ServiceDescriptor]:
        """Read-only view of the registered services by name."""
        return MappingProxyType(self._services)

    def set(self, name: str, definition: object, *, shared: bool = False) -> ServiceDescriptor:
        """Register a service, replacing any service with the same name.

        Args:
            name: Service name.
            definition: Class name string, class, factory function, structured
                definition (or its mapping form), or a literal instance.
            shared: Resolve the service at most once and reuse the instance.

        Returns:
            The registered service descriptor.

        Raises:
            SvcWireConfigurationError: If a mapping definition is malformed.

        """
        if isinstance(definition, type):
            self._classes.register(definition)
        return self.set_service(
            ServiceDescriptor(name, definition, shared=shared, builder=self._builder),
        )

    def set_shared(self, name: str, definition: object) -> ServiceDescriptor:
        """Register a shared service."""
        return self.set(name, definition, shared=True)

    def attempt(
        self,
        name: str,
        definition: object,
        *,
        shared: bool = False,
    ) -> ServiceDescriptor | None:
        """Register a service only if the name is not taken yet.

        Returns:
            The new descriptor, or ``None`` when a service was already registered.

        """
        with self._lock:
            if name in self._services:
                return None
            return self.set(name, definition, shared=shared)

    def set_service(self, service: ServiceDescriptor) -> ServiceDescriptor:
        """Register an already built service descriptor under its own name."""
        with self._lock:
            self._services[service.name] = service
            self._shared_instances.pop(service.name, None)
        return service

    def get_service(self, name: str) -> ServiceDescriptor:
        """Return the descriptor registered under ``name``.

        Raises:
            SvcWireServiceNotRegisteredError: If no service has that name.

        """
        service = self._services.get(name)
        if service is None:
            raise SvcWireServiceNotRegisteredError(name)
        return service

    def get_raw(self, name: str) -> Any:
        """Return the definition of a service without resolving it."""
        return self.get_service(name).definition

    def has(self, name: str) -> bool:
        return name in self._services

    def remove(self, name: str) -> None:
        """Remove a service and its container-level shared instance, if any."""
        with self._lock:
            self._services.pop(name, None)
            self._shared_instances.pop(name, None)

    def get(self, name: str, parameters: Sequence[Any] | None = None) -> Any:
        """Resolve a service, or construct a class known to the class registry.

        Args:
            name: Service name, or a class name when no service has that name.
            parameters: Positional arguments overriding the definition's own
                constructor arguments.

        Returns:
            The resolved instance.

        Raises:
            SvcWireServiceNotRegisteredError: If ``name`` is neither a service
                nor a constructible class.
            SvcWireCircularDependencyError: If cycle detection is enabled and
                ``name`` depends on itself.
            SvcWireServiceResolutionError: If the service cannot be resolved.

        Examples:
            .. code-block:: python

                request = container.get("request")
                report = container.get("report", ["2024-01"])

        """
        with self._lock, self._tracking(name):
            service = self._services.get(name)
            if service is not None:
                logger.debug("Resolving service %r", name)
                return service.resolve(parameters, self)

            constructor = self._classes.find(name)
            if constructor is None:
                raise SvcWireServiceNotRegisteredError(name)
            logger.debug("Constructing unregistered class %r", name)
            if parameters:
                return constructor(*parameters)
            return constructor()

    def get_shared(self, name: str, parameters: Sequence[Any] | None = None) -> Any:
        """Resolve ``name`` once and return the same instance on later calls.

        The instance is cached by the container under ``name`` whether or not
        the service itself is shared. ``parameters`` only apply to the first
        resolution.
        """
        with self._lock:
            if name in self._shared_instances:
                return self._shared_instances[name]
            instance = self.get(name, parameters)
            self._shared_instances[name] = instance
            return instance

    def clear_shared_instances(self) -> None:
        """Drop every cached shared instance so services are built again."""
        with self._lock:
            self._shared_instances.clear()
            for service in self._services.values():
                service.set_shared_instance(MISSING)

    def inject(self, func: F) -> F:
        """Wrap ``func`` so ``FromService`` parameters are filled from this container.

        Injected parameters are hidden from the wrapper's signature and passed
        by keyword, so declare them after the regular parameters. Explicitly
        passed keyword arguments win over injection.

        Examples:
            .. code-block:: python

                @container.inject
                def send(text: str, mailer: Annotated[Mailer, FromService("mailer")]) -> None:
                    mailer.send(text)

                send("hello")

        """
        inspection = _INJECTED_CALLABLE_INSPECTOR.inspect_callable(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for parameter in inspection.service_parameters:
                if parameter.name not in kwargs:
                    kwargs[parameter.name] = self.get(
                        parameter.marker.name,
                        parameter.marker.parameters or None,
                    )
            return func(*args, **kwargs)

        wrapper.__signature__ = inspection.public_signature  # type: ignore[attr-defined]
        return cast("F", wrapper)

    def _tracking(self, name: str) -> AbstractContextManager[None]:
        if self._detect_cycles:
            return resolving(self, name)
        return nullcontext()

    def __contains__(self, name: object) -> bool:
        return name in self._services

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, definition: object) -> None:
        self.set(name, definition)

    def __delitem__(self, name: str) -> None:
        self.remove(name)

    def __len__(self) -> int:
        return len(self._services)


__all__ = ["Container"]
