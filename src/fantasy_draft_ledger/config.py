from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from fantasy_draft_ledger.domain.roles import CLASSIC_ORDER, DEFAULT_CLASSIC_CAPS
from fantasy_draft_ledger.domain.tier import ImportMode
from fantasy_draft_ledger.exceptions import ValidationError


class AppConfig(Protocol):
    def __getitem__(self, key: str) -> object: ...


_DEFAULTS: dict[str, object] = {
    "db": {
        "path": "~/.config/fdl/ledger.db",
        "pool_size": 5,
    },
    "catalog": {
        "season": "2025-26",
    },
    "import": {
        "chunk_size": 200,
        "mode": "auto",
    },
    "league": {
        "total_budget": 500,
        "max_players_per_team": 25,
        "max_members": 10,
        "allow_negative_budget": False,
        "role_caps": dict(DEFAULT_CLASSIC_CAPS),
    },
}


@dataclass(frozen=True)
class LedgerSettings:
    db_path: Path
    pool_size: int
    season: str
    chunk_size: int
    import_mode: ImportMode
    total_budget: int
    max_players_per_team: int
    max_members: int
    allow_negative_budget: bool
    role_caps: dict[str, int] = field(default_factory=dict)


def create_config(
    yaml_path: str = "fdl.yaml",
    env_prefix: str = "FDL",
    defaults: dict[str, object] | None = None,
    *,
    overrides: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file. A missing file is ignored.
        env_prefix: Prefix for environment variables, e.g. ``FDL__DB__PATH``.
        defaults: Default configuration values.
        overrides: Values that win over every other layer (CLI flags).
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]
    if overrides:
        layers.insert(0, config_from_dict(overrides))
    return ConfigurationSet(*layers)


def _to_int(cfg: AppConfig, key: str) -> int:
    raw = cfg[key]
    try:
        return int(str(raw))
    except ValueError:
        raise ValidationError(f"{key} must be an integer, got {raw!r}") from None


def _to_bool(cfg: AppConfig, key: str) -> bool:
    raw = cfg[key]
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ValidationError(f"{key} must be a boolean, got {raw!r}")


def _role_caps(cfg: AppConfig) -> dict[str, int]:
    # Environment keys arrive lower-cased (FDL__LEAGUE__ROLE_CAPS__P -> "p").
    caps: dict[str, int] = {}
    for role in CLASSIC_ORDER:
        for key in (f"league.role_caps.{str(role).lower()}", f"league.role_caps.{role}"):
            try:
                caps[str(role)] = _to_int(cfg, key)
            except KeyError:
                continue
            break
    return caps


def load_settings(cfg: AppConfig | None = None) -> LedgerSettings:
    if cfg is None:
        cfg = create_config()
    try:
        import_mode = ImportMode.parse(str(cfg["import.mode"]))
    except ValueError:
        raise ValidationError(f"unknown import mode {cfg['import.mode']!r}") from None

    settings = LedgerSettings(
        db_path=Path(str(cfg["db.path"])).expanduser(),
        pool_size=_to_int(cfg, "db.pool_size"),
        season=str(cfg["catalog.season"]),
        chunk_size=_to_int(cfg, "import.chunk_size"),
        import_mode=import_mode,
        total_budget=_to_int(cfg, "league.total_budget"),
        max_players_per_team=_to_int(cfg, "league.max_players_per_team"),
        max_members=_to_int(cfg, "league.max_members"),
        allow_negative_budget=_to_bool(cfg, "league.allow_negative_budget"),
        role_caps=_role_caps(cfg),
    )
    if settings.pool_size < 1:
        raise ValidationError("db.pool_size must be at least 1")
    if settings.chunk_size < 1:
        raise ValidationError("import.chunk_size must be at least 1")
    return settings
