"""Configuration value objects exchanged between parent and worker."""

from .provider_settings import (
    CommandLineOption,
    DirectoryScanParameters,
    ForkContext,
    ProviderConfiguration,
    ReporterConfiguration,
    RunOrder,
    RunOrderParameters,
    Shutdown,
    TestArtifactInfo,
    TestListResolver,
    TestRequest,
)
from .startup_settings import (
    ClassLoaderConfiguration,
    Classpath,
    ClasspathConfiguration,
    StartupConfiguration,
)

__all__ = [
    "Classpath",
    "ClasspathConfiguration",
    "ClassLoaderConfiguration",
    "StartupConfiguration",
    "CommandLineOption",
    "DirectoryScanParameters",
    "ForkContext",
    "ProviderConfiguration",
    "ReporterConfiguration",
    "RunOrder",
    "RunOrderParameters",
    "Shutdown",
    "TestArtifactInfo",
    "TestListResolver",
    "TestRequest",
]
