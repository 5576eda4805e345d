"""
phonecheck/config.py
JSON config, persisted to phonecheck_config.json in the project root.
Unknown keys are kept; missing keys fall back to DEFAULT_CONFIG.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "phonecheck_config.json"

DEFAULT_CONFIG = {
    "db_path": "phonecheck_reports.db",
    "registry_path": None,                  # None → packaged sample dataset
    "numverify_enabled": False,
    "numverify_key": "",
    "numverify_url": "http://apilayer.net/api/validate",
    "numverify_timeout": 10.0,
    "scamalert_enabled": True,
    "scamalert_accepts_reports": True,
    "simulate_latency": True,
    "random_seed": None,                    # None → nondeterministic heuristic
    "report_success_policy": "any",         # any / all / local
    "fallback_confidence": 95,
}

NUMVERIFY_KEY_ENV = "NUMVERIFY_KEY"


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def load_config(
    project_root: Optional[Path] = None,
    path:         Optional[Path] = None,
) -> Dict[str, Any]:
    """Load config from phonecheck_config.json. Returns defaults if missing or corrupt."""
    path = Path(path) if path is not None else _config_path(project_root)
    config = dict(DEFAULT_CONFIG)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                config.update(data)
            else:
                logger.warning(f"Config {path} is not a JSON object, using defaults")
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Config load failed: {e}")

    if not config.get("numverify_key"):
        env_key = os.environ.get(NUMVERIFY_KEY_ENV, "")
        if env_key:
            config["numverify_key"] = env_key
    return config


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to phonecheck_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def ensure_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load or create config. Writes the defaults on first run so users have a
    file to edit. Returns merged config.
    """
    path = _config_path(project_root)
    config = load_config(project_root)
    if not path.exists():
        try:
            # the env-sourced key is not written back to disk
            save_config({**config, "numverify_key": ""}, project_root)
            logger.info(f"Wrote default config → {path}")
        except OSError as e:
            logger.warning(f"Could not write default config: {e}")
    return config
