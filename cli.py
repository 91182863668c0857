#!/usr/bin/env python3
"""Sign a request or decode an X-Argus value from the command line.

Usage:
    python cli.py sign --query "device_id=123456789&aid=1233" --body "a=b"
    python cli.py decode-argus <x-argus value>
"""
from __future__ import annotations

import argparse
import json
import logging

import argus
from errors import SigningError
from request_signer import SignConfig, sign_request

signing_logger = logging.getLogger('signing')


def cmd_sign(args: argparse.Namespace) -> int:
    cfg = SignConfig(
        raw_request_parameters=args.query,
        request_payload=args.body,
        sec_device_id=args.sec_device_id,
        cookie=args.cookie,
        app_id=args.aid,
        license_id=args.license_id,
        unix_timestamp=args.timestamp,
    )
    headers = sign_request(cfg)
    print(json.dumps(headers, indent=2, sort_keys=True))
    return 0


def cmd_decode_argus(args: argparse.Namespace) -> int:
    pb = argus.decrypt(args.value)
    print(pb.dump())
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Request header signer")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("sign", help="print the signed header map as JSON")
    sp.add_argument("--query", required=True, help="raw query string (must contain device_id)")
    sp.add_argument("--body", default="", help="request body")
    sp.add_argument("--cookie", default="")
    sp.add_argument("--sec-device-id", default="")
    sp.add_argument("--aid", type=int, default=0, help="app id (default from config)")
    sp.add_argument("--license-id", type=int, default=0, help="license id (default from config)")
    sp.add_argument("--timestamp", type=float, default=0.0, help="unix seconds (default: now)")
    sp.set_defaults(func=cmd_sign)

    dp = sub.add_parser("decode-argus", help="decrypt an X-Argus value and list its fields")
    dp.add_argument("value")
    dp.set_defaults(func=cmd_decode_argus)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        return args.func(args)
    except SigningError as e:
        signing_logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
