#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Specialists bridge entrypoint

Loads configuration (missing bindings are fatal), then serves the
specialist tools as an MCP server: over stdio for a host that spawns the
process, or as streamable HTTP mounted on the FastAPI app.
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

import uvicorn

from assistants_client.config.settings import SERVER_NAME, SERVER_VERSION, load_config
from assistants_client.core.errors import ConfigurationError
from assistants_client.core.logging import logger
from specialists_bridge.app import create_app
from specialists_bridge.config import HOST, PORT
from specialists_bridge.mcp_server import serve_stdio
from specialists_bridge.tools import SpecialistService


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=f"{SERVER_NAME} v{SERVER_VERSION}")
    parser.add_argument("--transport", choices=["stdio", "http"], default="stdio")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)

    try:
        config = load_config()
    except ConfigurationError as e:
        logger.error(f"Startup aborted: {e}")
        return 1

    service = SpecialistService(config)
    logger.info(
        f"Starting {SERVER_NAME} v{SERVER_VERSION} transport={args.transport} "
        f"(base_url={config.base_url}, poll_timeout_ms={config.poll_timeout_ms})"
    )
    if args.transport == "stdio":
        try:
            asyncio.run(serve_stdio(service))
        except KeyboardInterrupt:
            logger.info("Interrupted, stdio server stopped")
        return 0

    # uvicorn turns SIGINT/SIGTERM into the app shutdown event
    uvicorn.run(create_app(service), host=args.host, port=args.port, log_level="info")
    return 0


if __name__ == "__main__":
    sys.exit(main())
