"""Backend registration and provider resolution.

Backends register constructors while the registry is open. The composition
root seals it once every plugin has loaded; only then can the configured
provider name be resolved.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .errors import ConfigurationError
from .identifiers import is_safe_identifier
from .provider import LockProvider

if TYPE_CHECKING:
    from .config import HostSettings

ProviderConstructor = Callable[[str, logging.Logger], LockProvider]
Plugin = Callable[["ProviderRegistry", "HostSettings"], None]

logger = logging.getLogger(__name__)


class RegistryPhase(str, Enum):
    OPEN = "open"
    SEALED = "sealed"


class ProviderRegistry:
    """Name to constructor table with an explicit open/sealed lifecycle."""

    def __init__(self) -> None:
        self._constructors: Dict[str, ProviderConstructor] = {}
        self._phase = RegistryPhase.OPEN

    @property
    def phase(self) -> RegistryPhase:
        return self._phase

    @property
    def sealed(self) -> bool:
        return self._phase is RegistryPhase.SEALED

    def register(self, name: str, constructor: ProviderConstructor) -> None:
        if self.sealed:
            raise ConfigurationError(
                f"cannot register backend {name!r}: all backends have already registered."
            )
        if not isinstance(name, str) or not name or not is_safe_identifier(name):
            raise ConfigurationError(f"backend name expected to be a safe identifier, got {name!r}")
        if not callable(constructor):
            raise ConfigurationError(
                f"constructor for backend {name!r} expected to be callable, "
                f"got {type(constructor).__name__}"
            )
        if name in self._constructors:
            raise ConfigurationError(f"duplicate registration for backend {name!r}")
        self._constructors[name] = constructor
        logger.debug("registered lock backend %s", name)

    def seal(self) -> None:
        """Mark that every plugin has registered."""
        self._phase = RegistryPhase.SEALED

    def names(self) -> List[str]:
        return sorted(self._constructors)

    def __contains__(self, name: object) -> bool:
        return name in self._constructors

    def resolve(
        self,
        name: str,
        current_instance: str,
        log: Optional[logging.Logger] = None,
    ) -> LockProvider:
        """Construct the named backend for ``current_instance``."""
        if not self.sealed:
            raise ConfigurationError(
                "lock providers cannot be resolved before all backends have registered."
            )
        constructor = self._constructors.get(name)
        if constructor is None:
            known = " ".join(self.names()) or "<none>"
            raise ConfigurationError(f"unknown lock_provider {name!r}; known providers: {known}")

        provider_log = log or logging.getLogger(f"player_world_lock.provider.{name}")
        provider = constructor(current_instance, provider_log)
        if not isinstance(provider, LockProvider):
            raise ConfigurationError(
                f"backend {name!r} constructor returned {type(provider).__name__}, "
                "not a LockProvider"
            )
        return provider


DEFAULT_REGISTRY = ProviderRegistry()


def register_backend(name: str, constructor: ProviderConstructor) -> None:
    """Register a backend in the process-wide registry."""
    DEFAULT_REGISTRY.register(name, constructor)


def default_registry() -> ProviderRegistry:
    """Return the process-wide registry that ``register_backend`` writes to."""
    return DEFAULT_REGISTRY
