"""Tests for engrave config loader."""

from __future__ import annotations

import warnings
from pathlib import Path

import pytest
import yaml

from engrave.config import (
    ConfigError,
    EngraveConfig,
    ensure_project_config,
    load_config,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.dump(data), encoding="utf-8")


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("ENGRAVE_UPLOADS_ROOT", "ENGRAVE_SCAN_TIMEOUT", "ENGRAVE_PASSWORDS"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def no_global(tmp_path: Path) -> Path:
    return tmp_path / "nonexistent" / "config.yaml"


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def test_load_config_defaults_no_files(tmp_path: Path, no_global: Path) -> None:
    """No config files → hardcoded defaults, uploads root under project dir."""
    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)

    assert cfg.store.uploads_root == str(tmp_path / "uploads")
    assert cfg.view.scan_timeout is None
    assert cfg.view.max_workers == 6
    assert cfg.notifications.enabled is True
    assert cfg.notifications.recipients == {}
    assert cfg.passwords == []


def test_default_dataclass() -> None:
    cfg = EngraveConfig()
    assert cfg.store.uploads_root == "uploads"
    assert cfg.notifications.sender_name == "Headstone World"


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------


def test_global_config_applies(tmp_path: Path) -> None:
    global_cfg = tmp_path / "config.yaml"
    _write_yaml(global_cfg, {"view": {"max_workers": 3}})

    cfg = load_config(project_dir=tmp_path, global_config_path=global_cfg)
    assert cfg.view.max_workers == 3


def test_project_overrides_global(tmp_path: Path) -> None:
    global_cfg = tmp_path / "global.yaml"
    _write_yaml(global_cfg, {"store": {"uploads_root": "/srv/a"}, "view": {"max_workers": 3}})
    _write_yaml(tmp_path / "engrave.yaml", {"store": {"uploads_root": "/srv/b"}})

    cfg = load_config(project_dir=tmp_path, global_config_path=global_cfg)
    assert cfg.store.uploads_root == "/srv/b"
    assert cfg.view.max_workers == 3


def test_empty_files_give_defaults(tmp_path: Path) -> None:
    global_cfg = tmp_path / "config.yaml"
    global_cfg.write_text("", encoding="utf-8")
    (tmp_path / "engrave.yaml").write_text("", encoding="utf-8")

    cfg = load_config(project_dir=tmp_path, global_config_path=global_cfg)
    assert cfg.view.max_workers == 6


def test_env_overrides(tmp_path: Path, no_global: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_yaml(tmp_path / "engrave.yaml", {"store": {"uploads_root": "/srv/b"}})
    monkeypatch.setenv("ENGRAVE_UPLOADS_ROOT", "/srv/env")
    monkeypatch.setenv("ENGRAVE_SCAN_TIMEOUT", "2.5")
    monkeypatch.setenv("ENGRAVE_PASSWORDS", "alpha, beta,,")

    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)
    assert cfg.store.uploads_root == "/srv/env"
    assert cfg.view.scan_timeout == 2.5
    assert cfg.passwords == ["alpha", "beta"]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("key", ["password", "passwords", "api_key", "smtp_token", "client_secret"])
def test_secret_keys_forbidden(tmp_path: Path, no_global: Path, key: str) -> None:
    _write_yaml(tmp_path / "engrave.yaml", {"notifications": {key: "x"}})
    with pytest.raises(ConfigError):
        load_config(project_dir=tmp_path, global_config_path=no_global)


def test_unknown_section_warns(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "engrave.yaml", {"mystery": {}})
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        load_config(project_dir=tmp_path, global_config_path=no_global)
    assert any("mystery" in str(w.message) for w in caught)


@pytest.mark.parametrize("timeout", [0, -1, "soon"])
def test_bad_scan_timeout(tmp_path: Path, no_global: Path, timeout) -> None:
    _write_yaml(tmp_path / "engrave.yaml", {"view": {"scan_timeout": timeout}})
    with pytest.raises(ConfigError):
        load_config(project_dir=tmp_path, global_config_path=no_global)


@pytest.mark.parametrize("workers", [0, "many", [2]])
def test_bad_max_workers(tmp_path: Path, no_global: Path, workers) -> None:
    _write_yaml(tmp_path / "engrave.yaml", {"view": {"max_workers": workers}})
    with pytest.raises(ConfigError):
        load_config(project_dir=tmp_path, global_config_path=no_global)


def test_recipients_parsed(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(
        tmp_path / "engrave.yaml",
        {
            "notifications": {
                "recipients": {
                    "cemetery_submission": ["office@example.com", "granite@example.com"],
                    "engraving_submission": "engraver@example.com",
                }
            }
        },
    )
    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)
    assert cfg.notifications.recipients == {
        "cemetery_submission": ["office@example.com", "granite@example.com"],
        "engraving_submission": ["engraver@example.com"],
    }


def test_recipient_must_be_email(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(
        tmp_path / "engrave.yaml",
        {"notifications": {"recipients": {"cemetery_submission": ["not-an-address"]}}},
    )
    with pytest.raises(ConfigError):
        load_config(project_dir=tmp_path, global_config_path=no_global)


# ---------------------------------------------------------------------------
# ensure_project_config
# ---------------------------------------------------------------------------


def test_ensure_project_config_round_trips(tmp_path: Path, no_global: Path) -> None:
    path = ensure_project_config(tmp_path)
    assert path.name == "engrave.yaml"

    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)
    assert cfg.store.uploads_root == str(tmp_path / "uploads")
    assert cfg.view.scan_timeout is None


def test_ensure_project_config_keeps_existing(tmp_path: Path) -> None:
    target = tmp_path / "engrave.yaml"
    target.write_text("store:\n  uploads_root: custom\n", encoding="utf-8")
    ensure_project_config(tmp_path)
    assert "custom" in target.read_text(encoding="utf-8")
