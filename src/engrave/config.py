"""Engrave configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (ENGRAVE_UPLOADS_ROOT, ENGRAVE_SCAN_TIMEOUT, ENGRAVE_PASSWORDS)
  3. Per-project engrave.yaml  (working directory)
  4. Global ~/.engrave/config.yaml
  5. Hardcoded defaults

No config file may contain passwords or other credentials; operator passwords
are read from ENGRAVE_PASSWORDS only.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".engrave"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "engrave.yaml"

ENV_UPLOADS_ROOT = "ENGRAVE_UPLOADS_ROOT"
ENV_SCAN_TIMEOUT = "ENGRAVE_SCAN_TIMEOUT"
ENV_PASSWORDS = "ENGRAVE_PASSWORDS"

# Keys that look like credentials. Matches password, passwd, api_key,
# *_token, *_secret, credential(s); not recipients or sender.
_SECRET_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_EMAIL_RE: re.Pattern[str] = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_KNOWN_SECTIONS: frozenset[str] = frozenset(["store", "view", "notifications"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class StoreCfg:
    """Job store location (engrave.yaml: store:)."""

    uploads_root: str = "uploads"


@dataclass
class ViewCfg:
    """Consolidated job view settings (engrave.yaml: view:).

    Attributes:
        scan_timeout: Seconds to wait for the stage-image scans. None waits
            indefinitely.
        max_workers: Worker threads used for the scans.
    """

    scan_timeout: float | None = None
    max_workers: int = 6


@dataclass
class NotificationsCfg:
    """Outbound e-mail notifications (engrave.yaml: notifications:).

    Attributes:
        enabled: Whether write events are turned into e-mails.
        sender: From address.
        sender_name: From display name.
        recipients: Event kind → list of addresses, e.g.
            ``{"cemetery_submission": ["office@example.com"]}``.
    """

    enabled: bool = True
    sender: str = ""
    sender_name: str = "Headstone World"
    recipients: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class EngraveConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    store: StoreCfg = field(default_factory=StoreCfg)
    view: ViewCfg = field(default_factory=ViewCfg)
    notifications: NotificationsCfg = field(default_factory=NotificationsCfg)
    passwords: list[str] = field(default_factory=list)  # from env only


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_secrets(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any credential-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else str(k)
                if _SECRET_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Config '{source}' contains a forbidden key '{full}'.\n"
                        f"  Credentials must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name}; operator passwords go in:\n"
                        f"    export {ENV_PASSWORDS}=<password>[,<password>...]"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _parse_timeout(value: Any, source: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{source}: scan_timeout must be a number, got '{value}'") from None
    if timeout <= 0:
        raise ConfigError(f"{source}: scan_timeout must be positive, got {timeout:g}")
    return timeout


def _parse_recipients(raw: Any) -> dict[str, list[str]]:
    if not raw:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("notifications.recipients must be a mapping of event kind → addresses")
    recipients: dict[str, list[str]] = {}
    for kind, addresses in raw.items():
        if isinstance(addresses, str):
            addresses = [addresses]
        cleaned = [str(a).strip() for a in addresses or []]
        for address in cleaned:
            if not _EMAIL_RE.match(address):
                raise ConfigError(
                    f"notifications.recipients.{kind}: '{address}' is not an e-mail address"
                )
        recipients[str(kind)] = cleaned
    return recipients


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> EngraveConfig:
    """Build an *EngraveConfig* from a merged raw YAML dict."""
    cfg = EngraveConfig()

    if "store" in data:
        s = data["store"] or {}
        cfg.store = StoreCfg(
            uploads_root=str(s.get("uploads_root", cfg.store.uploads_root)),
        )

    if "view" in data:
        v = data["view"] or {}
        raw_workers = v.get("max_workers", cfg.view.max_workers)
        try:
            max_workers = int(raw_workers)
        except (TypeError, ValueError):
            raise ConfigError(f"view.max_workers must be an integer, got '{raw_workers}'") from None
        if max_workers < 1:
            raise ConfigError(f"view.max_workers must be >= 1, got {max_workers}")
        cfg.view = ViewCfg(
            scan_timeout=_parse_timeout(v.get("scan_timeout"), "view"),
            max_workers=max_workers,
        )

    if "notifications" in data:
        n = data["notifications"] or {}
        cfg.notifications = NotificationsCfg(
            enabled=bool(n.get("enabled", cfg.notifications.enabled)),
            sender=str(n.get("sender", cfg.notifications.sender)),
            sender_name=str(n.get("sender_name", cfg.notifications.sender_name)),
            recipients=_parse_recipients(n.get("recipients")),
        )

    return cfg


def _apply_env_overrides(cfg: EngraveConfig) -> EngraveConfig:
    """Apply ENGRAVE_* environment variable overrides."""
    if root := os.environ.get(ENV_UPLOADS_ROOT):
        cfg.store.uploads_root = root
    if timeout := os.environ.get(ENV_SCAN_TIMEOUT):
        cfg.view.scan_timeout = _parse_timeout(timeout, ENV_SCAN_TIMEOUT)
    if passwords := os.environ.get(ENV_PASSWORDS):
        cfg.passwords = [p.strip() for p in passwords.split(",") if p.strip()]
    return cfg


def _load_layer(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config '{path}' must contain a YAML mapping.")
    _check_no_secrets(raw, path)
    _warn_unknown_keys(raw, path)
    return raw


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> EngraveConfig:
    """Load and return a merged *EngraveConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *engrave.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *EngraveConfig* with env var overrides applied. A
        relative ``store.uploads_root`` is resolved against *project_dir*.

    Raises:
        ConfigError: If a config file contains credential-like keys or
            invalid values.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        merged = _deep_merge(merged, _load_layer(global_path))

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        merged = _deep_merge(merged, _load_layer(project_cfg_path))

    cfg = _cfg_from_dict(merged)
    cfg = _apply_env_overrides(cfg)

    root = Path(cfg.store.uploads_root).expanduser()
    if not root.is_absolute():
        root = search_dir / root
    cfg.store.uploads_root = str(root)

    return cfg


def ensure_project_config(project_dir: Path) -> Path:
    """Create ``engrave.yaml`` in *project_dir* with defaults if it does not exist.

    Returns:
        Path to the project config file.
    """
    target = project_dir / _PROJECT_CONFIG_NAME
    if not target.exists():
        content = (
            "# Engrave project configuration.\n"
            "# NEVER store passwords here — use environment variables:\n"
            f"#   export {ENV_PASSWORDS}=<password>[,<password>...]\n"
            "\n"
            "store:\n"
            "  uploads_root: uploads\n"
            "\n"
            "view:\n"
            "  scan_timeout: null\n"
            "  max_workers: 6\n"
            "\n"
            "notifications:\n"
            "  enabled: true\n"
            "  sender: \"\"\n"
            "  sender_name: Headstone World\n"
            "  recipients: {}\n"
        )
        target.write_text(content, encoding="utf-8")
    return target
