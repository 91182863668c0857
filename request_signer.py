"""Compose X-Gorgon, X-Ladon and X-Argus into the signed header map."""
from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional

import argus
from config import get_settings
from errors import PreconditionFailed
from gorgon import Gorgon
from ladon import ladon_encrypt
from crypto import md5_hex
from utils import now, unix_seconds, unix_millis, query_param

signing_logger = logging.getLogger('signing')


@dataclass
class SignConfig:
    raw_request_parameters: str
    request_payload: str | bytes = ""
    sec_device_id: str = ""
    cookie: str = ""
    app_id: int = 0
    license_id: int = 0
    sdk_version_string: str = ""
    sdk_version_int: int = 0
    platform: int = 0
    unix_timestamp: float = 0.0


def with_defaults(cfg: SignConfig, settings: Optional[Dict] = None) -> SignConfig:
    """Fill zero/empty fields from config.yaml / environment."""
    s = settings if settings is not None else get_settings()
    return replace(
        cfg,
        app_id=cfg.app_id or s["app_id"],
        license_id=cfg.license_id or s["license_id"],
        sdk_version_string=cfg.sdk_version_string or s["sdk_version"],
        sdk_version_int=cfg.sdk_version_int or s["sdk_version_int"],
        platform=cfg.platform or s["platform"],
        unix_timestamp=cfg.unix_timestamp or now(),
    )


def sign_request(cfg: SignConfig, *,
                 settings: Optional[Dict] = None,
                 rand: Optional[int] = None,
                 ladon_random: Optional[bytes] = None) -> Dict[str, str]:
    """Return the full signed header map, or raise; never a partial result."""
    s = settings if settings is not None else get_settings()
    cfg = with_defaults(cfg, s)

    if not cfg.raw_request_parameters:
        raise PreconditionFailed("raw request parameters must not be empty")
    if not query_param(cfg.raw_request_parameters, "device_id"):
        raise PreconditionFailed("raw request parameters must contain device_id")

    body = cfg.request_payload.encode("utf-8") if isinstance(cfg.request_payload, str) else bytes(cfg.request_payload)
    seconds = unix_seconds(cfg.unix_timestamp)
    stub = md5_hex(body).upper()

    headers = Gorgon(seconds, cfg.raw_request_parameters, body, cfg.cookie).get_value()
    x_ladon = ladon_encrypt(seconds, cfg.license_id, cfg.app_id, random_bytes=ladon_random)
    x_argus = argus.get_sign(
        cfg.raw_request_parameters,
        stub,
        seconds,
        aid=cfg.app_id,
        license_id=cfg.license_id,
        platform=cfg.platform,
        sec_device_id=cfg.sec_device_id,
        sdk_version=cfg.sdk_version_string,
        sdk_version_int=cfg.sdk_version_int,
        version_name=s["version_name"],
        rand=rand,
    )

    headers["x-khronos"] = str(seconds)
    headers["x-ss-req-ticket"] = str(unix_millis(cfg.unix_timestamp))
    headers["content-length"] = str(len(body))
    headers["x-ss-stub"] = stub
    headers["x-ladon"] = x_ladon
    headers["x-argus"] = x_argus
    signing_logger.info(f"signed request at {seconds} for aid={cfg.app_id}")
    return headers
