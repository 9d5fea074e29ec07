"""Korastor server entry point — ``python -m korastor.core.server.main``."""

from __future__ import annotations

import asyncio
import logging
from ipaddress import ip_address

from korastor.core.config.settings import get_settings
from korastor.core.server.app import create_app, create_context


def _is_loopback_host(host: str) -> bool:
    if host in {"localhost"}:
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the Korastor MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.korastor_log_level.upper(), logging.INFO))

    logger = logging.getLogger(__name__)
    if not settings.korastor_allow_insecure_bind and not _is_loopback_host(settings.korastor_host):
        raise RuntimeError(
            "Refusing to bind Korastor to a non-loopback host without an auth layer. "
            "Set KORASTOR_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    logger.info(
        "Starting Korastor server on %s:%d",
        settings.korastor_host,
        settings.korastor_port,
    )

    context = create_context(settings)
    mcp = create_app(context=context)
    try:
        mcp.run(
            transport="streamable-http",
            host=settings.korastor_host,
            port=settings.korastor_port,
        )
    finally:
        asyncio.run(context.shutdown())
        logger.info("Korastor server stopped")


if __name__ == "__main__":
    run()
