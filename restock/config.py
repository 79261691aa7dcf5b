from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import streamlit as st

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "RESTOCK_DATA_DIR"
ENV_WORKSPACE = "RESTOCK_WORKSPACE"
ENV_ACTOR = "RESTOCK_ACTOR"
ENV_DEMAND_WINDOW = "RESTOCK_DEMAND_WINDOW"
ENV_LOG_LEVEL = "RESTOCK_LOG_LEVEL"
ENV_CAN_MANAGE_PURCHASING = "RESTOCK_CAN_MANAGE_PURCHASING"

UNITS_PER_GALLON = 128
DEFAULT_DEMAND_WINDOW = 14


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    workspace_id: str = "default"
    actor_name: str = "Manager"
    demand_window: int = DEFAULT_DEMAND_WINDOW
    log_level: str = "INFO"
    can_manage_purchasing: bool = True
    units_per_gallon: int = UNITS_PER_GALLON

    @property
    def log_dir(self) -> Path:
        return self.data_dir / "logs"


def _default_data_dir() -> Path:
    return Path.home() / ".restock"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
    return {}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be a whole number.")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    cfg = data_dir / CONFIG_FILE_NAME
    payload = {"data_dir": str(data_dir)}
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # Update session for immediate effect
    st.session_state["restock_data_dir"] = str(data_dir)


def build_settings(data_dir: Optional[Path] = None) -> Settings:
    """
    Resolve settings from the environment around an explicit data directory.
    When no directory is given, fall back to the persisted/default location.
    """
    if data_dir is None:
        default_dir = _default_data_dir()
        persisted = _load_persisted_settings(default_dir)
        data_dir = Path(persisted.get("data_dir", default_dir))
    data_dir = Path(data_dir).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    return Settings(
        data_dir=data_dir,
        db_path=data_dir / "restock.db",
        workspace_id=os.getenv(ENV_WORKSPACE, "").strip() or "default",
        actor_name=os.getenv(ENV_ACTOR, "").strip() or "Manager",
        demand_window=max(1, _env_int(ENV_DEMAND_WINDOW, DEFAULT_DEMAND_WINDOW)),
        log_level=(os.getenv(ENV_LOG_LEVEL, "").strip() or "INFO").upper(),
        can_manage_purchasing=_env_flag(ENV_CAN_MANAGE_PURCHASING, True),
    )


@st.cache_resource
def get_settings() -> Settings:
    # Priority order:
    # 1) Session state (set via Data Management page)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    if "restock_data_dir" in st.session_state:
        return build_settings(Path(st.session_state["restock_data_dir"]))
    if os.getenv(ENV_DATA_DIR):
        return build_settings(Path(os.getenv(ENV_DATA_DIR, "")))
    return build_settings()
