"""Composition root wiring configuration, backends and the join/transfer hooks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from . import files_backend, http_backend
from .config import HostSettings, WorldLockConfig, get_host_settings, load_config
from .errors import ConfigurationError
from .friendly import FriendlyNames
from .gate import JoinGate
from .host import GameHost, PlayerHandle
from .identifiers import SAFE_CHARSET_DISPLAY, is_safe_identifier
from .provider import LockProvider
from .registry import Plugin, ProviderRegistry, default_registry
from .transfer import TransferService

logger = logging.getLogger(__name__)

DEFAULT_PLUGINS: Tuple[Plugin, ...] = (files_backend.register, http_backend.register)


def build_provider(
    config: WorldLockConfig,
    settings: HostSettings,
    registry: Optional[ProviderRegistry] = None,
    plugins: Sequence[Plugin] = DEFAULT_PLUGINS,
) -> LockProvider:
    """Load backend plugins, seal the registry and construct the configured provider."""
    if not config.instance_name or not is_safe_identifier(config.instance_name):
        raise ConfigurationError(
            f"current instance name {config.instance_name!r} was not safe; "
            f"use only {SAFE_CHARSET_DISPLAY}"
        )

    registry = default_registry() if registry is None else registry
    for plugin in plugins:
        plugin(registry, settings)
    registry.seal()
    logger.info("known providers: %s", " ".join(registry.names()))

    return registry.resolve(config.lock_provider, config.instance_name)


@dataclass
class WorldLock:
    """A running player world lock: the admission hook plus the transfer entry point."""

    config: WorldLockConfig
    provider: LockProvider
    gate: JoinGate
    transfer: TransferService

    @classmethod
    def startup(
        cls,
        config: WorldLockConfig,
        host: GameHost,
        settings: Optional[HostSettings] = None,
        registry: Optional[ProviderRegistry] = None,
        plugins: Sequence[Plugin] = DEFAULT_PLUGINS,
    ) -> "WorldLock":
        settings = settings or get_host_settings()
        provider = build_provider(config, settings, registry=registry, plugins=plugins)
        friendly = FriendlyNames(config.friendly_names)
        gate = JoinGate(
            provider,
            config.instance_name,
            is_lock_master=config.is_lock_master,
            friendly_name=friendly,
            provider_name=config.lock_provider,
        )
        transfer = TransferService(provider, host, friendly_name=friendly)
        logger.info(
            "player world lock ready: instance=%s provider=%s lock_master=%s",
            config.instance_name,
            config.lock_provider,
            config.is_lock_master,
        )
        return cls(config=config, provider=provider, gate=gate, transfer=transfer)

    @classmethod
    def from_world(
        cls,
        host: GameHost,
        settings: Optional[HostSettings] = None,
        registry: Optional[ProviderRegistry] = None,
        plugins: Sequence[Plugin] = DEFAULT_PLUGINS,
    ) -> "WorldLock":
        """Start up from ``player_world_lock.json`` in the configured world directory."""
        settings = settings or get_host_settings()
        config = load_config(settings.config_path())
        return cls.startup(config, host, settings=settings, registry=registry, plugins=plugins)

    def on_prejoin(self, name: str, ip: Optional[str] = None) -> Optional[str]:
        return self.gate.on_prejoin(name, ip)

    def transfer_and_kick(self, player_handle: PlayerHandle, new_owner: str) -> None:
        self.transfer.transfer_and_kick(player_handle, new_owner)

    def close(self) -> None:
        self.provider.close()
