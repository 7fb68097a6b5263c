#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MCP tool server for the specialists bridge

Registers the six specialist tools and the three utility tools on a
FastMCP instance. The same registration is served over stdio or mounted
on the FastAPI app as streamable HTTP.

Every failed call surfaces as one tool error whose text starts with the
error category ("validation: ...", "timeout: ...", "internal: ...").
"""
import inspect
import json
from typing import Annotated, Any, Callable, List, Optional

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field, ValidationError

from assistants_client.config.settings import SERVER_NAME, TOOL_HEALTH_CHECK, TOOL_LIST_STATUS, TOOL_RESET_ALL
from assistants_client.core.errors import BridgeError, BridgeShuttingDownError, HttpError

from .logging import logger
from .models import ImageDetail, ToolInput
from .tools import SERVER_INSTRUCTION, SPECIALIST_TOOLS, UTILITY_DESCRIPTIONS, SpecialistService

ServiceProvider = Callable[[], Optional[SpecialistService]]


def _arg(name: str, **constraints: Any) -> Any:
    return Field(description=ToolInput.describe(name), **constraints)


PromptArg = Annotated[str, _arg("prompt", min_length=1)]
ContextArg = Annotated[Optional[str], _arg("context")]
FilesArg = Annotated[Optional[List[str]], _arg("files")]
ImageUrlsArg = Annotated[Optional[List[str]], _arg("image_urls")]
ImageFilesArg = Annotated[Optional[List[str]], _arg("image_files")]
ImageBase64Arg = Annotated[Optional[List[str]], _arg("image_base64")]
ImageDetailArg = Annotated[ImageDetail, _arg("image_detail")]
ResetThreadArg = Annotated[bool, _arg("reset_thread")]
ResetFilesArg = Annotated[bool, _arg("reset_files")]


def describe_error(error: Exception) -> str:
    """One-line failure text, prefixed with the error category."""
    if isinstance(error, HttpError):
        return f"{error.category}: remote HTTP {error.status_code}: {error.response_body or error}"
    if isinstance(error, BridgeError):
        return f"{error.category}: {error}"
    if isinstance(error, ValidationError):
        return f"validation: {error}"
    if isinstance(error, httpx.TransportError):
        return f"transport: {type(error).__name__}: {error}"
    return f"internal: {type(error).__name__}: {error}"


async def _run(tool_name: str, call: Callable[[], Any]) -> Any:
    try:
        result = call()
        if inspect.isawaitable(result):
            result = await result
        return result
    except Exception as e:
        detail = describe_error(e)
        if isinstance(e, (BridgeError, ValidationError, httpx.TransportError)):
            logger.error(f"[Specialists] Tool {tool_name} failed: {detail}")
        else:
            logger.exception(f"[Specialists] Tool {tool_name} failed unexpectedly: {detail}")
        raise ToolError(detail) from e


def _specialist_handler(tool_name: str, service: Callable[[], SpecialistService]):
    async def handler(
        prompt: PromptArg,
        context: ContextArg = None,
        files: FilesArg = None,
        image_urls: ImageUrlsArg = None,
        image_files: ImageFilesArg = None,
        image_base64: ImageBase64Arg = None,
        image_detail: ImageDetailArg = "auto",
        reset_thread: ResetThreadArg = False,
        reset_files: ResetFilesArg = False,
    ) -> str:
        def invoke():
            tool_input = ToolInput(
                prompt=prompt,
                context=context,
                files=files,
                image_urls=image_urls,
                image_files=image_files,
                image_base64=image_base64,
                image_detail=image_detail,
                reset_thread=reset_thread,
                reset_files=reset_files,
            )
            return service().invoke(tool_name, tool_input)

        return await _run(tool_name, invoke)

    handler.__name__ = tool_name
    return handler


def build_mcp_server(get_service: ServiceProvider, **settings: Any) -> FastMCP:
    """Create a FastMCP server whose tools dispatch to the current service."""
    server = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTION, **settings)

    def service() -> SpecialistService:
        current = get_service()
        if current is None:
            raise BridgeShuttingDownError("Bridge service is not initialized")
        return current

    for tool in SPECIALIST_TOOLS.values():
        server.add_tool(_specialist_handler(tool.name, service), name=tool.name, description=tool.description)

    @server.tool(name=TOOL_RESET_ALL, description=UTILITY_DESCRIPTIONS[TOOL_RESET_ALL])
    async def reset_all_specialists(
        confirm: Annotated[bool, Field(description="Set to false to cancel the reset")] = True,
    ) -> str:
        return await _run(TOOL_RESET_ALL, lambda: service().reset_all(confirm))

    @server.tool(name=TOOL_LIST_STATUS, description=UTILITY_DESCRIPTIONS[TOOL_LIST_STATUS])
    async def list_specialists_status() -> str:
        status = await _run(TOOL_LIST_STATUS, lambda: service().list_status())
        return json.dumps(status, indent=2, ensure_ascii=False)

    @server.tool(name=TOOL_HEALTH_CHECK, description=UTILITY_DESCRIPTIONS[TOOL_HEALTH_CHECK])
    async def check_openai_connection() -> str:
        report = await _run(TOOL_HEALTH_CHECK, lambda: service().health_check())
        return json.dumps(report, indent=2, ensure_ascii=False)

    logger.info(f"[Specialists] MCP server built with {len(SPECIALIST_TOOLS) + len(UTILITY_DESCRIPTIONS)} tools")
    return server


async def serve_stdio(service: SpecialistService) -> None:
    """Serve the tools over stdio until the host closes the stream."""
    server = build_mcp_server(lambda: service)
    logger.info("[Specialists] Serving MCP over stdio")
    try:
        await server.run_stdio_async()
    finally:
        await service.shutdown("stdio closed")
