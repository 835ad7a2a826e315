from svcwire.arguments import ArgumentResolver
from svcwire.builder import InstanceBuilder
from svcwire.container import Container
from svcwire.definitions import (
    MISSING,
    ArgumentSpec,
    ClassNameDefinition,
    FactoryDefinition,
    InstanceArgument,
    InstanceDefinition,
    MethodCall,
    ParameterArgument,
    PropertyAssignment,
    ServiceArgument,
    ServiceDefinition,
    StructuredDefinition,
)
from svcwire.exceptions import (
    SvcWireArgumentError,
    SvcWireCircularDependencyError,
    SvcWireConfigurationError,
    SvcWireError,
    SvcWireServiceNotRegisteredError,
    SvcWireServiceResolutionError,
)
from svcwire.lock_mode import LockMode
from svcwire.markers import FromService
from svcwire.registry import ClassRegistry
from svcwire.service import ServiceDescriptor

__all__ = [
    "MISSING",
    "ArgumentResolver",
    "ArgumentSpec",
    "ClassNameDefinition",
    "ClassRegistry",
    "Container",
    "FactoryDefinition",
    "FromService",
    "InstanceArgument",
    "InstanceBuilder",
    "InstanceDefinition",
    "LockMode",
    "MethodCall",
    "ParameterArgument",
    "PropertyAssignment",
    "ServiceArgument",
    "ServiceDefinition",
    "ServiceDescriptor",
    "StructuredDefinition",
    "SvcWireArgumentError",
    "SvcWireCircularDependencyError",
    "SvcWireConfigurationError",
    "SvcWireError",
    "SvcWireServiceNotRegisteredError",
    "SvcWireServiceResolutionError",
]
