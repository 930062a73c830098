"""Backend abstraction for translation services.

This module provides a registry pattern for managing translation backends,
allowing runtime selection of different services.
"""

import logging
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .base import TranslationBackend

from .codebuddy import CodebuddyBackend
from .google import GoogleBackend
from .unknown import UnknownBackend

logger = logging.getLogger(__name__)

__all__ = ["BackendRegistry", "UnknownBackend"]


class BackendRegistry:
    """Registry for managing translation backends.

    This class maintains a registry of available backends,
    allowing registration and retrieval by name.
    """

    _backends: ClassVar[dict[str, type["TranslationBackend"]]] = {}
    _instances: ClassVar[dict[str, "TranslationBackend"]] = {}

    @classmethod
    def register(cls, name: str, backend_class: type["TranslationBackend"]) -> None:
        """Register a translation backend.

        Args:
            name: Name to register the backend under
            backend_class: Class that implements TranslationBackend
        """
        cls._backends[name] = backend_class
        cls._instances.pop(name, None)

    @classmethod
    def get(cls, name: str) -> type["TranslationBackend"]:
        """Get a backend class by name.

        Raises:
            KeyError: If backend name not found
        """
        if name not in cls._backends:
            available = ", ".join(cls._backends.keys()) if cls._backends else "none"
            raise KeyError(
                f"Backend '{name}' not found. Available backends: {available}"
            )
        return cls._backends[name]

    @classmethod
    def get_instance(cls, name: str) -> "TranslationBackend":
        """Get a shared backend instance by name, creating it on first use.

        Raises:
            KeyError: If backend name not found
        """
        if name not in cls._instances:
            backend_class = cls.get(name)
            cls._instances[name] = backend_class()
        return cls._instances[name]

    @classmethod
    def available(cls) -> list[str]:
        return list(cls._backends.keys())

    @classmethod
    def resolve(cls, name: str) -> "TranslationBackend":
        """Get the shared backend for a configured service name.

        Unlike get_instance(), an unknown name does not raise here: a
        configuration mistake must not stop the host. The returned
        UnknownBackend fails every request with BackendUnavailableError,
        which the pipeline reports to the user once.
        """
        try:
            return cls.get_instance(name)
        except KeyError as e:
            logger.warning(e.args[0])
            return UnknownBackend(name, cls.available())


# Register backends
BackendRegistry.register("google", GoogleBackend)
BackendRegistry.register("codebuddy", CodebuddyBackend)
