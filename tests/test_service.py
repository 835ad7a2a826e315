from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

from svcwire.container import Container
from svcwire.definitions import (
    MISSING,
    ClassNameDefinition,
    InstanceDefinition,
    MethodCall,
    ParameterArgument,
    ServiceArgument,
    StructuredDefinition,
)
from svcwire.exceptions import (
    SvcWireArgumentError,
    SvcWireConfigurationError,
    SvcWireServiceResolutionError,
)
from svcwire.service import ServiceDescriptor


class Logger:
    pass


class Transport:
    pass


class Mailer:
    def __init__(self, *args: Any) -> None:
        self.args = args


class Widget:
    def __init__(self) -> None:
        self.logger_calls: list[Any] = []

    def set_logger(self, logger: Any) -> None:
        self.logger_calls.append(logger)


@pytest.fixture()
def wired_container(container: Container) -> Container:
    container.classes.add("Logger", Logger)
    container.classes.add("Mailer", Mailer)
    container.classes.add("Widget", Widget)
    return container


@pytest.fixture()
def mailer_service() -> ServiceDescriptor:
    return ServiceDescriptor(
        "mailer",
        StructuredDefinition("Mailer", arguments=(ServiceArgument("transport"),)),
    )


class TestSharedIdentity:
    def test_shared_class_name_service_resolves_to_one_instance(
        self,
        wired_container: Container,
    ) -> None:
        service = ServiceDescriptor("logger", "Logger", shared=True)

        first = service.resolve(container=wired_container)
        second = service.resolve(container=wired_container)

        assert isinstance(first, Logger)
        assert first is second
        assert service.shared_instance is first
        assert service.is_resolved

    def test_non_shared_service_resolves_to_fresh_instances(
        self,
        wired_container: Container,
    ) -> None:
        service = ServiceDescriptor("logger", "Logger")

        first = service.resolve(container=wired_container)
        second = service.resolve(container=wired_container)

        assert first is not second
        assert service.shared_instance is MISSING
        assert service.is_resolved

    def test_shared_none_result_is_cached(self) -> None:
        calls: list[int] = []

        def factory() -> None:
            calls.append(1)

        service = ServiceDescriptor("nothing", factory, shared=True)

        assert service.resolve() is None
        assert service.resolve() is None
        assert calls == [1]

    def test_set_definition_drops_the_cached_instance(self, wired_container: Container) -> None:
        service = ServiceDescriptor("logger", "Logger", shared=True)
        first = service.resolve(container=wired_container)

        service.set_definition("Logger")

        assert service.shared_instance is MISSING
        assert not service.is_resolved
        assert service.resolve(container=wired_container) is not first

    def test_unsharing_drops_the_cached_instance(self, wired_container: Container) -> None:
        service = ServiceDescriptor("logger", "Logger", shared=True)
        service.resolve(container=wired_container)

        service.set_shared(False)

        assert service.shared_instance is MISSING
        assert not service.shared

    def test_seeded_shared_instance_is_returned(self) -> None:
        service = ServiceDescriptor("logger", "Logger", shared=True)
        logger = Logger()

        service.set_shared_instance(logger)

        assert service.resolve() is logger


class TestClassNameDefinition:
    def test_parameters_are_passed_positionally(self, wired_container: Container) -> None:
        service = ServiceDescriptor("mailer", "Mailer")

        assert service.resolve(["smtp", 25], wired_container).args == ("smtp", 25)

    def test_empty_parameters_construct_without_arguments(self, wired_container: Container) -> None:
        service = ServiceDescriptor("mailer", "Mailer")

        assert service.resolve([], wired_container).args == ()

    def test_dotted_path_resolves_without_container(self) -> None:
        service = ServiceDescriptor("price", "decimal.Decimal")

        assert service.resolve(["1.50"]) == Decimal("1.50")

    def test_class_object_is_kept_when_its_path_cannot_be_imported(
        self,
        container: Container,
    ) -> None:
        class Local:
            pass

        service = ServiceDescriptor("local", Local, shared=True)

        instance = service.resolve(container=container)

        assert isinstance(instance, Local)
        assert service.resolve() is instance

    def test_set_definition_with_a_local_class(self) -> None:
        class Local:
            pass

        service = ServiceDescriptor("local", "Missing")
        service.set_definition(Local)

        assert isinstance(service.resolve(container=Container(import_classes=False)), Local)

    def test_unknown_class_names_the_service(self, wired_container: Container) -> None:
        service = ServiceDescriptor("ghost", "Ghost")

        with pytest.raises(SvcWireServiceResolutionError) as exc_info:
            service.resolve(container=wired_container)

        assert exc_info.value.service_name == "ghost"
        assert "Service 'ghost' cannot be resolved" in str(exc_info.value)


class TestFactoryDefinition:
    def test_factory_receives_container_keyword(self, container: Container) -> None:
        received: list[Any] = []

        def factory(*, container: Container) -> str:
            received.append(container)
            return "built"

        service = ServiceDescriptor("thing", factory)

        assert service.resolve(container=container) == "built"
        assert received == [container]

    def test_factory_can_ask_the_container_for_collaborators(self, container: Container) -> None:
        container.set("transport", Transport())

        def factory(sender: str, *, container: Container) -> Mailer:
            return Mailer(sender, container.get("transport"))

        service = ServiceDescriptor("mailer", factory)
        mailer = service.resolve(["noreply"], container)

        assert mailer.args[0] == "noreply"
        assert isinstance(mailer.args[1], Transport)

    def test_factory_without_container_parameter_gets_parameters_only(self) -> None:
        service = ServiceDescriptor("sum", lambda a, b: a + b)

        assert service.resolve([2, 3]) == 5

    def test_factory_without_parameters_is_called_bare(self) -> None:
        service = ServiceDescriptor("answer", lambda: 42)

        assert service.resolve() == 42


class TestInstanceDefinition:
    def test_literal_instance_passes_through(self) -> None:
        payload = ["debug", True]
        service = ServiceDescriptor("config", payload)

        assert service.definition == InstanceDefinition(payload)
        assert service.resolve() is payload
        assert service.resolve(["ignored"]) is payload


class TestStructuredDefinition:
    def test_mailer_is_constructed_with_the_transport_service(
        self,
        wired_container: Container,
        mailer_service: ServiceDescriptor,
    ) -> None:
        transport = Transport()
        wired_container.set("transport", transport)

        mailer = mailer_service.resolve(container=wired_container)

        assert isinstance(mailer, Mailer)
        assert mailer.args == (transport,)

    def test_set_parameter_replaces_the_service_reference(
        self,
        wired_container: Container,
        mailer_service: ServiceDescriptor,
    ) -> None:
        mailer_service.set_parameter(0, ParameterArgument("literal-transport"))

        mailer = mailer_service.resolve(container=wired_container)

        # "transport" is not registered, so reaching the container would fail.
        assert mailer.args == ("literal-transport",)

    def test_set_parameter_changes_the_given_position(self, wired_container: Container) -> None:
        service = ServiceDescriptor(
            "mailer",
            StructuredDefinition(
                "Mailer",
                arguments=(ParameterArgument("a"), ParameterArgument("b")),
            ),
        )

        service.set_parameter(1, {"kind": "parameter", "value": "X"})

        assert service.resolve(container=wired_container).args == ("a", "X")

    def test_set_parameter_past_the_end_fills_gaps(self, wired_container: Container) -> None:
        service = ServiceDescriptor("mailer", StructuredDefinition("Mailer"))

        returned = service.set_parameter(2, ParameterArgument("c"))

        assert returned is service
        assert service.get_parameter(1) == ParameterArgument(None)
        assert service.resolve(container=wired_container).args == (None, None, "c")

    def test_set_parameter_rejects_negative_positions(
        self,
        mailer_service: ServiceDescriptor,
    ) -> None:
        with pytest.raises(SvcWireConfigurationError, match="negative"):
            mailer_service.set_parameter(-1, ParameterArgument(1))

    def test_set_parameter_rejects_malformed_mappings(
        self,
        mailer_service: ServiceDescriptor,
    ) -> None:
        with pytest.raises(SvcWireArgumentError):
            mailer_service.set_parameter(0, {"kind": "parameter"})

    def test_get_parameter_distinguishes_missing_from_none(self) -> None:
        service = ServiceDescriptor(
            "mailer",
            StructuredDefinition("Mailer", arguments=(ParameterArgument(None),)),
        )

        assert service.get_parameter(0) == ParameterArgument(None)
        assert service.get_parameter(1) is MISSING
        assert service.get_parameter(-1) is MISSING

    def test_override_parameters_bypass_declared_arguments(
        self,
        wired_container: Container,
        mailer_service: ServiceDescriptor,
    ) -> None:
        mailer = mailer_service.resolve(["override"], wired_container)

        assert mailer.args == ("override",)

    def test_setter_runs_once_with_the_resolved_logger(self, wired_container: Container) -> None:
        wired_container.set_shared("logger", "Logger")
        service = ServiceDescriptor(
            "widget",
            StructuredDefinition(
                "Widget",
                calls=(MethodCall("set_logger", (ServiceArgument("logger"),)),),
            ),
        )

        widget = service.resolve(container=wired_container)

        assert widget.logger_calls == [wired_container.get("logger")]

    def test_parameters_require_a_structured_definition(self) -> None:
        service = ServiceDescriptor("logger", "Logger")

        with pytest.raises(SvcWireConfigurationError, match="update its parameters"):
            service.set_parameter(0, ParameterArgument(1))
        with pytest.raises(SvcWireConfigurationError, match="obtain its parameters"):
            service.get_parameter(0)


class TestFromState:
    def test_restores_a_descriptor(self) -> None:
        service = ServiceDescriptor.from_state(
            {"name": "logger", "definition": "Logger", "shared": True},
        )

        assert service.name == "logger"
        assert service.definition == ClassNameDefinition("Logger")
        assert service.shared

    @pytest.mark.parametrize("missing", ["name", "definition", "shared"])
    def test_requires_every_attribute(self, missing: str) -> None:
        attributes = {"name": "logger", "definition": "Logger", "shared": False}
        del attributes[missing]

        with pytest.raises(SvcWireConfigurationError, match=repr(missing)):
            ServiceDescriptor.from_state(attributes)

    def test_falsy_shared_flag_counts_as_present(self) -> None:
        service = ServiceDescriptor.from_state(
            {"name": "logger", "definition": "Logger", "shared": False},
        )

        assert not service.shared
