from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from assistants_client.config.settings import load_config

from .config import HOST, MCP_MOUNT_PATH, SERVICE_TITLE, SERVICE_VERSION
from .logging import logger
from .mcp_server import build_mcp_server
from .router import router
from .tools import SpecialistService


def create_app(service: Optional[SpecialistService] = None) -> FastAPI:
    # stateless JSON responses: every POST to the mount is one self-contained MCP exchange
    mcp_server = build_mcp_server(
        lambda: app.state.service,
        host=HOST,
        stateless_http=True,
        json_response=True,
        streamable_http_path="/",
    )
    mcp_http = mcp_server.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.service is None:
            # ConfigurationError here is fatal: the server never starts serving
            app.state.service = SpecialistService(load_config())
        config = app.state.service.config
        logger.info(
            "[Specialists] Server starting. base_url=%s poll_timeout_ms=%s",
            config.base_url, config.poll_timeout_ms,
        )
        logger.info("[Specialists] Endpoints: GET /healthz, POST %s/ (MCP streamable HTTP)", MCP_MOUNT_PATH)
        try:
            async with mcp_server.session_manager.run():
                yield
        finally:
            await app.state.service.shutdown("server shutdown")

    app = FastAPI(title=SERVICE_TITLE, version=SERVICE_VERSION, lifespan=lifespan)
    app.state.service = service
    app.include_router(router)
    app.mount(MCP_MOUNT_PATH, mcp_http)
    return app
