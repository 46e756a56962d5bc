"""Configuration loading for TradeLog.

Settings live in ``~/.config/tradelog/config.toml``. A missing or
unreadable file yields the defaults.
"""

import logging
from pathlib import Path
from typing import Optional

import toml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "tradelog"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = {
    "storage": {
        "db_path": str(CONFIG_DIR / "tradelog.db"),
    },
    "stats": {
        "big_day_threshold": 400.0,
        "small_day_threshold": 100.0,
    },
    "logging": {
        "level": "WARNING",
    },
}


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration merged over the defaults.

    Args:
        config_path: Config file path; defaults to ``CONFIG_PATH``.

    Returns:
        Config dict with every default section present.
    """
    path = config_path or CONFIG_PATH
    config = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}

    if not path.exists():
        return config

    try:
        loaded = toml.load(path)
    except (toml.TomlDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return config

    for section, values in loaded.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
    return config


def get_db_path(config: dict) -> Path:
    """Resolve the journal database path from config."""
    return Path(config["storage"]["db_path"]).expanduser()


def create_template_config(config_path: Optional[Path] = None) -> Path:
    """Write the default configuration to disk if none exists.

    Returns:
        Path of the config file.
    """
    path = config_path or CONFIG_PATH
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            toml.dump(DEFAULT_CONFIG, f)
    return path
