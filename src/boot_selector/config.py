"""
Configuration and logging setup for boot-selector
-------------------------------------------------

Settings are kept in a nested dictionary.  ``DEFAULT_CONFIG`` holds the
built-in values; a user file in YAML or JSON format is merged over it so
that missing keys fall back to the defaults.  The file path is taken from
the ``--config`` option or the ``BOOT_SELECTOR_CONFIG`` environment
variable.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from boot_selector.errors import BootConfigError


CONFIG_ENV_VAR = "BOOT_SELECTOR_CONFIG"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        # One of 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'.
        "level": "WARNING",
        # Optional file to also write logs to.
        "file": None,
    },
    "tools": {
        # Seconds to wait for a native tool; None waits indefinitely.
        "timeout": None,
    },
    "linux": {
        "efibootmgr": "efibootmgr",
        # Broker used to run efibootmgr with root rights: pkexec, sudo or none.
        "elevation": "pkexec",
        "reboot_command": "reboot",
    },
    "windows": {
        "bcdedit": "bcdedit",
        "restart_tool": "shutdown",
    },
}


def _merge_dicts(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``b`` over ``a`` and return a new dictionary."""
    result: Dict[str, Any] = dict(a)
    for key, value in b.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load a configuration file and merge it with the default config.

    Parameters
    ----------
    path : str or None
        Path to a YAML or JSON file.  If None, ``BOOT_SELECTOR_CONFIG`` is
        consulted, and without it the defaults are returned.

    Returns
    -------
    dict
        The merged configuration.

    Raises
    ------
    BootConfigError
        If the file cannot be read or does not hold a mapping.
    """
    path = path or os.environ.get(CONFIG_ENV_VAR)
    cfg = default_config()
    if not path:
        return cfg
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise BootConfigError(f"Cannot read configuration file {path}: {e.strerror}") from e
    try:
        # Detect YAML vs JSON by first character
        if text.lstrip().startswith("{"):
            data = json.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (ValueError, yaml.YAMLError) as e:
        raise BootConfigError(f"Cannot parse configuration file {path}: {e}") from e
    if not isinstance(data, dict):
        raise BootConfigError(f"Configuration file {path} must contain a mapping")
    return _merge_dicts(cfg, data)


def setup_logging(log_cfg: Dict[str, Any]) -> None:
    """Configure the root logging handlers from the ``logging`` section."""
    level_name = str(log_cfg.get("level") or "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    log_file = log_cfg.get("file")
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
