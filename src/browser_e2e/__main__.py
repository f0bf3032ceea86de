#!/usr/bin/env python3
"""
Command-line helpers for the e2e bootstrap.

    python -m browser_e2e environments   # list the environments suites will run on
    python -m browser_e2e check          # check the browser host is reachable
    python -m browser_e2e tunnel         # run BrowserStack Local until Ctrl+C
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from browser_e2e.config import E2EConfig, debug_enabled, load_config, setup_logging
from browser_e2e.core.errors import BrowserE2EError
from browser_e2e.environments import get_test_environments
from browser_e2e.tunnel import LocalTunnel

logger = logging.getLogger("browser_e2e")


def list_environments(config: E2EConfig) -> bool:
    source = "BrowserStack" if config.browserstack.enabled else "local"
    print(f"Host: {config.browser_host_url}")
    print(f"Environments ({source}):")
    for environment in get_test_environments(config):
        print(f"  - {environment.description}")
    return True


async def check_host(config: E2EConfig, timeout: float = 10.0, transport=None) -> bool:
    """Request the browser host URL and report whether it answered."""
    url = config.browser_host_url
    if config.browserstack.local_enabled:
        # bs-local.com only resolves through the tunnel; check the local endpoint instead
        url = url.replace("bs-local.com", "localhost", 1)
    try:
        async with httpx.AsyncClient(follow_redirects=True, timeout=timeout, transport=transport) as client:
            response = await client.get(url)
    except httpx.HTTPError as e:
        print(f"Host {url} is not reachable: {e}")
        return False
    print(f"Host {url} answered {response.status_code}")
    return response.status_code < 500


async def run_tunnel(config: E2EConfig) -> bool:
    bs = config.browserstack
    if not bs.enabled:
        print("USE_BROWSERSTACK is not set, nothing to tunnel")
        return False
    tunnel = LocalTunnel(bs.key, local_identifier=bs.local_identifier, binary_path=bs.local_binary_path)
    await tunnel.start()
    print("BrowserStack Local is running. Press Ctrl+C to stop")
    try:
        while tunnel.is_running():
            await asyncio.sleep(1)
    finally:
        await tunnel.stop()
    return True


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Browser e2e test bootstrap helpers.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("environments", help="List the browser environments suites will use.")
    check = subparsers.add_parser("check", help="Check that the browser host url responds.")
    check.add_argument("--timeout", type=float, default=10.0, help="Request timeout in seconds.")
    subparsers.add_parser("tunnel", help="Run BrowserStack Local until interrupted.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> bool:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(debug=args.debug or debug_enabled())
    try:
        config = load_config()
        if args.command == "environments":
            return list_environments(config)
        if args.command == "check":
            return asyncio.run(check_host(config, timeout=args.timeout))
        return asyncio.run(run_tunnel(config))
    except BrowserE2EError as e:
        print(f"Error: {e}")
        return False
    except KeyboardInterrupt:
        print("\nStopped")
        return True


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
