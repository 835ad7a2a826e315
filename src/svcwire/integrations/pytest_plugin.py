"""pytest plugin filling ``Annotated[T, FromService(...)]`` test parameters.

Load it with ``pytest_plugins = ["svcwire.integrations.pytest_plugin"]`` and
override the ``svcwire_container`` fixture to register services.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any

import pytest

from svcwire.container import Container
from svcwire.injection import InjectedCallableInspector, ServiceParameter

CONTAINER_FIXTURE = "svcwire_container"

_SERVICE_TEST_ATTR = "__svcwire_service_test__"
_INJECTED_CALLABLE_INSPECTOR = InjectedCallableInspector()


@dataclass(frozen=True, slots=True)
class ServiceTest:
    """What a collected test needs at call time.

    ``fixture_names`` are the parameters pytest fills, ``service_parameters``
    the ones resolved from the container.
    """

    fixture_names: tuple[str, ...]
    service_parameters: tuple[ServiceParameter, ...]


@pytest.fixture()
def svcwire_container() -> Container:
    """Container that ``FromService`` test parameters are resolved from.

    Returns an empty ``Container``. Override it to register services.
    """
    return Container()


def pytest_pycollect_makeitem(collector: Any, name: str, obj: object) -> None:
    """Swap ``FromService`` parameters for a ``svcwire_container`` request.

    pytest reads fixture names off the signature, so the marked parameters are
    hidden from it and the container fixture is requested in their place.
    """
    if not callable(obj) or not collector.istestfunction(obj, name):
        return
    inspection = _INJECTED_CALLABLE_INSPECTOR.inspect_callable(obj)
    if not inspection.service_parameters:
        return

    function: Any = obj
    function.__dict__[_SERVICE_TEST_ATTR] = ServiceTest(
        fixture_names=tuple(inspection.public_signature.parameters),
        service_parameters=inspection.service_parameters,
    )
    function.__signature__ = _with_container_fixture(inspection.public_signature)


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Call tests that have ``FromService`` parameters with resolved services.

    Returns ``None`` for every other test so pytest calls it as usual.
    """
    function = pyfuncitem.obj
    service_test: ServiceTest | None = getattr(function, _SERVICE_TEST_ATTR, None)
    if service_test is None or inspect.iscoroutinefunction(function):
        return None

    funcargs = pyfuncitem.funcargs
    container: Container = funcargs[CONTAINER_FIXTURE]
    arguments = {name: funcargs[name] for name in service_test.fixture_names if name in funcargs}
    for parameter in service_test.service_parameters:
        arguments[parameter.name] = container.get(
            parameter.marker.name,
            parameter.marker.parameters or None,
        )
    function(**arguments)
    return True


def _with_container_fixture(signature: inspect.Signature) -> inspect.Signature:
    if CONTAINER_FIXTURE in signature.parameters:
        return signature
    parameters = list(signature.parameters.values())
    position = next(
        (
            index
            for index, parameter in enumerate(parameters)
            if parameter.kind is inspect.Parameter.VAR_KEYWORD
        ),
        len(parameters),
    )
    parameters.insert(
        position,
        inspect.Parameter(CONTAINER_FIXTURE, inspect.Parameter.KEYWORD_ONLY),
    )
    return signature.replace(parameters=parameters)


__all__ = ["CONTAINER_FIXTURE", "ServiceTest", "pytest_pycollect_makeitem", "pytest_pyfunc_call"]
