"""Startup configuration entities: classpaths, class loading and provider selection."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from fork_booter.errors import EncodingError


@dataclass(frozen=True)
class Classpath:
    """Ordered classpath elements; order is load precedence and duplicates are kept."""

    elements: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.elements, str):
            raise EncodingError("Classpath elements must be a sequence of strings, not a string.")
        elements = tuple(self.elements)
        for element in elements:
            if not isinstance(element, str):
                raise EncodingError("Classpath elements must be strings.")
        object.__setattr__(self, "elements", elements)

    @classmethod
    def empty(cls) -> Classpath:
        return cls(())

    @classmethod
    def of(cls, elements: Iterable[str]) -> Classpath:
        return cls(tuple(elements))

    def __iter__(self) -> Iterator[str]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def as_path_string(self) -> str:
        """Join the elements with the platform path separator."""
        return os.pathsep.join(self.elements)


@dataclass(frozen=True)
class ClasspathConfiguration:
    """Classpaths handed to the worker and how it should load them."""

    test_classpath: Classpath
    provider_classpath: Classpath
    additional_classpath: Classpath = field(default_factory=Classpath.empty)
    enable_assertions: bool = True
    child_delegation: bool = False

    def __post_init__(self) -> None:
        if self.test_classpath is None:
            raise EncodingError("ClasspathConfiguration.test_classpath must not be None.")
        if self.provider_classpath is None:
            raise EncodingError("ClasspathConfiguration.provider_classpath must not be None.")
        if self.additional_classpath is None:
            object.__setattr__(self, "additional_classpath", Classpath.empty())


@dataclass(frozen=True)
class ClassLoaderConfiguration:
    """Class loading strategy allowed inside the worker."""

    use_system_class_loader: bool
    use_manifest_only_jar: bool

    @property
    def manifest_only_jar_requested_and_usable(self) -> bool:
        """A manifest-only jar launch is only usable on top of the system class loader."""
        return self.use_manifest_only_jar and self.use_system_class_loader


@dataclass(frozen=True)
class StartupConfiguration:
    """Everything the worker needs before it can instantiate the test provider."""

    provider_class_name: str
    classpath_configuration: ClasspathConfiguration
    class_loader_configuration: ClassLoaderConfiguration
    fail_if_no_tests: bool = False
    is_forking: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.provider_class_name, str) or not self.provider_class_name.strip():
            raise EncodingError("StartupConfiguration.provider_class_name must not be empty.")
        if self.classpath_configuration is None:
            raise EncodingError("StartupConfiguration.classpath_configuration is required.")
        if self.class_loader_configuration is None:
            raise EncodingError("StartupConfiguration.class_loader_configuration is required.")

    @property
    def manifest_only_jar_requested_and_usable(self) -> bool:
        return self.class_loader_configuration.manifest_only_jar_requested_and_usable
