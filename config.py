"""Signing defaults: config.yaml, overridden by TTSIG_* environment variables."""
from __future__ import annotations
import os, logging
from typing import Any, Dict

import yaml

signing_logger = logging.getLogger('signing')

CONFIG_PATH = os.environ.get("TTSIG_CONFIG", os.path.join(os.path.dirname(__file__), "config.yaml"))

DEFAULTS: Dict[str, Any] = {
    "app_id": 1233,
    "license_id": 1611921764,
    "sdk_version": "v05.00.06-ov-android",
    "sdk_version_int": 167775296,
    "platform": 0,
    "version_name": "39.6.3",
}

ENV_OVERRIDES = {
    "app_id": ("TTSIG_APP_ID", int),
    "license_id": ("TTSIG_LICENSE_ID", int),
    "sdk_version": ("TTSIG_SDK_VERSION", str),
    "sdk_version_int": ("TTSIG_SDK_VERSION_INT", int),
    "platform": ("TTSIG_PLATFORM", int),
    "version_name": ("TTSIG_VERSION_NAME", str),
}


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            signing_logger.warning(f"ignoring unreadable config {path}: {e}")
            return {}
    return data if isinstance(data, dict) else {}


def get_settings(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """DEFAULTS < config file < environment."""
    settings = dict(DEFAULTS)
    settings.update({k: v for k, v in load_config(path).items() if k in DEFAULTS and v is not None})
    for key, (env_name, cast) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw:
            try:
                settings[key] = cast(raw)
            except ValueError as e:
                raise ValueError(f"{env_name} must be {cast.__name__}, got {raw!r}") from e
    return settings
