"""Global configuration stored next to the central store."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from memx.utils.paths import central_store_dir

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"

DEFAULTS = {
    "default_branch": "main",
    "provider": "claude",
}


def config_path() -> Path:
    return central_store_dir() / CONFIG_FILE


def load_global_config() -> dict:
    """Load config.json merged over the defaults. Unreadable files count as empty."""
    config = dict(DEFAULTS)
    path = config_path()
    if path.exists():
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.debug("Ignoring unreadable config %s: %s", path, e)
            data = {}
        if isinstance(data, dict):
            config.update({k: str(v) for k, v in data.items()})
    return config


def save_global_config(config: dict) -> None:
    path = config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config, indent=2))


def default_branch() -> str:
    return load_global_config()["default_branch"]
