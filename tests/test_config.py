from __future__ import annotations

from datetime import timedelta

import pytest

from dealership import EngineConfig


def test_defaults():
    config = EngineConfig()
    assert config.identifier_attempts == 8
    assert config.default_test_drive == timedelta(minutes=5)
    assert config.max_test_drive == timedelta(minutes=30)
    assert config.used_name_suffix == " (Used)"


def test_builder_returns_new_instances():
    base = EngineConfig()
    tuned = (
        base
        .with_identifier_attempts(3)
        .with_test_drive(default_seconds=60, max_seconds=120)
        .with_used_name_suffix(" [used]")
    )

    assert base.identifier_attempts == 8
    assert tuned.identifier_attempts == 3
    assert tuned.default_test_drive == timedelta(seconds=60)
    assert tuned.max_test_drive == timedelta(seconds=120)
    assert tuned.used_name_suffix == " [used]"


@pytest.mark.parametrize("attempts", [0, -3])
def test_rejects_non_positive_attempts(attempts):
    with pytest.raises(ValueError):
        EngineConfig().with_identifier_attempts(attempts)


@pytest.mark.parametrize("kwargs", [
    {"default_seconds": 0},
    {"max_seconds": -1},
    {"default_seconds": 600, "max_seconds": 300},
    {"default_seconds": 3600},
])
def test_rejects_bad_test_drive_durations(kwargs):
    with pytest.raises(ValueError):
        EngineConfig().with_test_drive(**kwargs)


def test_from_env():
    config = EngineConfig.from_env({
        "DEALERSHIP_IDENTIFIER_ATTEMPTS": "12",
        "DEALERSHIP_DEFAULT_TEST_DRIVE_SECONDS": "90",
        "DEALERSHIP_MAX_TEST_DRIVE_SECONDS": "900.5",
        "DEALERSHIP_USED_NAME_SUFFIX": " (Pre-owned)",
        "UNRELATED": "x",
    })

    assert config.identifier_attempts == 12
    assert config.default_test_drive == timedelta(seconds=90)
    assert config.max_test_drive == timedelta(seconds=900.5)
    assert config.used_name_suffix == " (Pre-owned)"


def test_from_env_empty_keeps_defaults():
    assert EngineConfig.from_env({}) == EngineConfig()


def test_from_env_custom_prefix():
    config = EngineConfig.from_env({"SHOP_IDENTIFIER_ATTEMPTS": "2"}, prefix="SHOP_")
    assert config.identifier_attempts == 2


def test_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv("DEALERSHIP_IDENTIFIER_ATTEMPTS", "5")
    assert EngineConfig.from_env().identifier_attempts == 5


@pytest.mark.parametrize("env", [
    {"DEALERSHIP_IDENTIFIER_ATTEMPTS": "many"},
    {"DEALERSHIP_MAX_TEST_DRIVE_SECONDS": "soon"},
    {"DEALERSHIP_IDENTIFIER_ATTEMPTS": "0"},
])
def test_from_env_malformed(env):
    with pytest.raises(ValueError):
        EngineConfig.from_env(env)
