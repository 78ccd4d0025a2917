# src/inner_loop_buddy/launch/probe.py

from __future__ import annotations

"""
Host availability probe.

Name resolution order differs between machines, and a dev server is often
bound to only one of 127.0.0.1 / ::1. Each round therefore tries IPv4 and
then IPv6 explicitly before sleeping.
"""

import asyncio
import logging
import socket
import time

logger = logging.getLogger(__name__)

RETRY_INTERVAL_SECONDS = 0.1


async def try_connect(host: str, port: int, family: socket.AddressFamily, timeout: float) -> bool:
    """One connect attempt. Any failure just means "not available yet"."""
    if timeout <= 0:
        return False
    try:
        _reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port, family=family),
            timeout=timeout,
        )
    except (OSError, asyncio.TimeoutError) as e:
        logger.debug("connect %s:%s (%s) failed: %s", host, port, family.name, e)
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


async def wait_for_host_available(host: str, port: int, timeout_ms: float) -> bool:
    """
    Poll until `host:port` accepts a TCP connection or `timeout_ms` elapses.

    Returns True on the first successful connect (either family), False only
    once the deadline has passed.
    """
    deadline = time.monotonic() + max(0.0, float(timeout_ms)) / 1000.0
    attempts = 0

    while time.monotonic() < deadline:
        attempts += 1
        for family in (socket.AF_INET, socket.AF_INET6):
            remaining = deadline - time.monotonic()
            if await try_connect(host, port, family, remaining):
                logger.debug("%s:%s available after %d attempt(s) via %s", host, port, attempts, family.name)
                return True

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        await asyncio.sleep(min(RETRY_INTERVAL_SECONDS, remaining))

    logger.info("%s:%s not available within %sms (%d attempts)", host, port, timeout_ms, attempts)
    return False
