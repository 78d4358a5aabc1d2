import json

import pytest

from player_world_lock import registry as registry_module
from player_world_lock.config import HostSettings, WorldLockConfig
from player_world_lock.errors import ConfigurationError
from player_world_lock.files_backend import FileLockProvider
from player_world_lock.gate import UNCLAIMED_MESSAGE
from player_world_lock.models import PUT_SUCCESS, UNCLAIMED, Owner
from player_world_lock.provider import LockProvider
from player_world_lock.registry import ProviderRegistry, register_backend
from player_world_lock.runtime import WorldLock, build_provider


class _Memory(LockProvider):
    def __init__(self, instance, log):
        self.records = {}
        self.closed = False

    def check(self, player):
        return Owner(self.records[player]) if player in self.records else UNCLAIMED

    def put(self, player, owner):
        self.records[player] = owner
        return PUT_SUCCESS

    def close(self):
        self.closed = True


class _Player:
    def __init__(self, name):
        self.name = name

    def get_player_name(self):
        return self.name


class _Host:
    def __init__(self, *players):
        self.players = list(players)
        self.kicked = []

    def get_connected_players(self):
        return list(self.players)

    def kick_player(self, name, reason):
        self.kicked.append((name, reason))


def settings_for(tmp_path):
    lockdir = tmp_path / "locks"
    lockdir.mkdir(exist_ok=True)
    return HostSettings(world_path=tmp_path, lockdir=str(lockdir))


def test_startup_wires_files_backend(tmp_path):
    settings = settings_for(tmp_path)
    config = WorldLockConfig(instance_name="home", lock_provider="files", is_lock_master=True)
    registry = ProviderRegistry()

    world = WorldLock.startup(config, _Host(), settings=settings, registry=registry)

    assert isinstance(world.provider, FileLockProvider)
    assert registry.sealed
    assert registry.names() == ["files", "http", "worlddir"]
    assert world.on_prejoin("alice") is None
    assert world.provider.check("alice") == Owner("home")


def test_from_world_reads_json_config(tmp_path):
    settings = settings_for(tmp_path)
    (tmp_path / "player_world_lock.json").write_text(
        json.dumps({"instance_name": "home", "lock_provider": "files"}), encoding="utf-8"
    )
    world = WorldLock.from_world(_Host(), settings=settings, registry=ProviderRegistry())
    assert world.config.is_lock_master is False
    assert world.on_prejoin("alice") == UNCLAIMED_MESSAGE


def test_transfer_entry_point(tmp_path):
    alice = _Player("alice")
    host = _Host(alice)
    config = WorldLockConfig(
        instance_name="home", lock_provider="files", friendly_names={"other": "Other Realm"}
    )
    world = WorldLock.startup(config, host, settings=settings_for(tmp_path), registry=ProviderRegistry())
    world.provider.put("alice", "home")

    world.transfer_and_kick(alice, "other")

    assert world.provider.check("alice") == Owner("other")
    assert host.kicked == [
        ("alice", "You are being transferred to another server. Please connect to: Other Realm")
    ]


def test_unknown_provider_is_fatal(tmp_path):
    config = WorldLockConfig(instance_name="home", lock_provider="redis")
    with pytest.raises(ConfigurationError):
        build_provider(config, settings_for(tmp_path), registry=ProviderRegistry())


def test_unsafe_instance_name_aborts_startup(tmp_path):
    config = WorldLockConfig.model_construct(instance_name="bad/name", lock_provider="files")
    with pytest.raises(ConfigurationError):
        build_provider(config, settings_for(tmp_path), registry=ProviderRegistry())


def test_late_plugin_registration_is_included(tmp_path):
    def memory_plugin(registry, settings):
        registry.register("memory", _Memory)

    config = WorldLockConfig(instance_name="home", lock_provider="memory")
    provider = build_provider(
        config, settings_for(tmp_path), registry=ProviderRegistry(), plugins=[memory_plugin]
    )
    assert isinstance(provider, _Memory)


@pytest.fixture
def shared_registry(monkeypatch):
    fresh = ProviderRegistry()
    monkeypatch.setattr(registry_module, "DEFAULT_REGISTRY", fresh)
    return fresh


def test_register_backend_before_startup_uses_shared_registry(tmp_path, shared_registry):
    register_backend("memory", _Memory)
    config = WorldLockConfig(instance_name="home", lock_provider="memory", is_lock_master=True)

    world = WorldLock.startup(config, _Host(), settings=settings_for(tmp_path))

    assert isinstance(world.provider, _Memory)
    assert shared_registry.sealed
    assert "files" in shared_registry
    assert world.on_prejoin("alice") is None
    assert world.provider.records == {"alice": "home"}


def test_register_backend_after_startup_is_fatal(tmp_path, shared_registry):
    config = WorldLockConfig(instance_name="home", lock_provider="files")
    WorldLock.startup(config, _Host(), settings=settings_for(tmp_path))

    with pytest.raises(ConfigurationError):
        register_backend("memory", _Memory)
    assert "memory" not in shared_registry


def test_second_startup_on_shared_registry_is_fatal(tmp_path, shared_registry):
    config = WorldLockConfig(instance_name="home", lock_provider="files")
    WorldLock.startup(config, _Host(), settings=settings_for(tmp_path))

    with pytest.raises(ConfigurationError):
        WorldLock.startup(config, _Host(), settings=settings_for(tmp_path))


def test_close_releases_provider(tmp_path):
    def memory_plugin(registry, settings):
        registry.register("memory", _Memory)

    config = WorldLockConfig(instance_name="home", lock_provider="memory")
    world = WorldLock.startup(
        config, _Host(), settings=settings_for(tmp_path), registry=ProviderRegistry(), plugins=[memory_plugin]
    )
    world.close()
    assert world.provider.closed
