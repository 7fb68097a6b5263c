from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from assistants_client.config.settings import (
    ASSISTANT_ENV_BY_TOOL,
    TOOL_A11Y,
    TOOL_HEALTH_CHECK,
    TOOL_LIST_STATUS,
    TOOL_MICROCOPY,
    TOOL_PERSONAS,
    TOOL_RESET_ALL,
    TOOL_SUPER_AGENT,
    TOOL_UI_CRITIQUE,
    TOOL_UX_CONSULTANT,
    BridgeConfig,
)
from assistants_client.core.errors import (
    BridgeShuttingDownError,
    InvalidInputError,
    UnknownToolError,
)
from assistants_client.core.session import BridgeSession
from assistants_client.remote.api_client import AssistantsApiClient
from assistants_client.remote.runs import ImageInputs, RunOrchestrator, combine_context
from assistants_client.remote.uploads import FileUploader

from .logging import logger
from .models import ToolInput

SERVER_INSTRUCTION = (
    "IMPORTANT: When this assistant asks clarifying questions, you MUST relay those questions "
    "to the human user and wait for their response. Do NOT answer on behalf of the user."
)


@dataclass(frozen=True)
class SpecialistTool:
    name: str
    env_key: str
    summary: str

    @property
    def description(self) -> str:
        return f"{self.summary} {SERVER_INSTRUCTION}"


_SUMMARIES = {
    TOOL_UX_CONSULTANT: "UX consultant for reviewing user experience designs and flows.",
    TOOL_PERSONAS: "Creates user personas and journey maps.",
    TOOL_UI_CRITIQUE: "UI design critique and visual design review.",
    TOOL_MICROCOPY: "Microcopy and UX writing specialist.",
    TOOL_A11Y: "Accessibility (a11y) review against WCAG standards.",
    TOOL_SUPER_AGENT: "Super agent that coordinates multiple specialists.",
}

SPECIALIST_TOOLS: Dict[str, SpecialistTool] = {
    name: SpecialistTool(name, env_key, _SUMMARIES.get(name, f"Specialist tool: {name}."))
    for name, env_key in ASSISTANT_ENV_BY_TOOL.items()
}

UTILITY_DESCRIPTIONS = {
    TOOL_RESET_ALL: "Reset all specialists: clears every thread, vector store and upload cache.",
    TOOL_LIST_STATUS: "List cached threads, vector stores, upload counts and effective configuration.",
    TOOL_HEALTH_CHECK: "Check connectivity to the OpenAI API and report latency.",
}


class SpecialistService:
    """Dispatches tool calls to assistants and owns the shared state."""

    def __init__(
        self,
        config: BridgeConfig,
        client: Optional[AssistantsApiClient] = None,
        session: Optional[BridgeSession] = None,
        root: Optional[Path] = None,
    ):
        self.config = config
        self.client = client or AssistantsApiClient(config)
        self.session = session or BridgeSession(config.max_cache_size)
        self.uploader = FileUploader(self.client, self.session, root)
        self.orchestrator = RunOrchestrator(self.client, self.session, config)
        self._shutting_down = False

    @property
    def accepting(self) -> bool:
        return not self._shutting_down

    async def invoke(self, tool_name: str, tool_input: ToolInput) -> str:
        if self._shutting_down:
            raise BridgeShuttingDownError()
        tool = SPECIALIST_TOOLS.get(tool_name)
        if tool is None:
            raise UnknownToolError(tool_name)
        if not tool_input.prompt or not tool_input.prompt.strip():
            raise InvalidInputError("prompt must be a non-empty string")

        logger.info(
            f"[Specialists] Tool invoked: {tool_name} context={bool(tool_input.context)} "
            f"files={len(tool_input.files or [])} images={tool_input.total_image_count} detail={tool_input.image_detail}"
        )

        assistant_id = self.config.assistant_id_for(tool.env_key)
        self.uploader.validate_inputs(tool_input.files or [], tool_input.image_files or [])

        if tool_input.reset_thread:
            self.session.reset_thread(tool_name)
        if tool_input.reset_files:
            self.session.reset_vector_store(tool_name)

        thread_id = await self.orchestrator.get_or_create_thread(tool_name)

        if tool_input.files:
            vector_store_id = await self.uploader.ensure_files_in_vector_store(tool_name, tool_input.files)
        else:
            vector_store_id = self.session.vector_store_by_tool.get(tool_name)

        image_file_ids: List[str] = []
        if tool_input.image_files:
            image_file_ids = await self.uploader.upload_images_for_vision(tool_input.image_files)

        images = ImageInputs(
            urls=tool_input.image_url_strings(),
            file_ids=image_file_ids,
            base64_images=list(tool_input.image_base64 or []),
            detail=tool_input.image_detail,
        )

        response = await self.orchestrator.run_assistant_on_thread(
            assistant_id,
            thread_id,
            combine_context(tool_input.prompt, tool_input.context),
            vector_store_id,
            images,
        )
        logger.info(f"[Specialists] Tool completed: {tool_name} response_length={len(response)}")
        return response

    def reset_all(self, confirm: bool = True) -> str:
        if not confirm:
            return "Reset cancelled."
        counts = self.session.reset_all()
        return (
            f"All specialist threads ({counts.threads}), vector stores ({counts.vector_stores}), "
            f"uploaded files ({counts.uploaded_files}), and vision files ({counts.vision_files}) have been reset."
        )

    def list_status(self) -> Dict[str, Any]:
        status = self.session.get_stats()
        status["config"] = self.config.public_view()
        logger.info(f"[Specialists] Status requested: {self.session.get_sizes()}")
        return status

    async def health_check(self) -> Dict[str, Any]:
        logger.info("[Specialists] Health check initiated")
        start = time.monotonic()
        try:
            await self.client.get("/models")
        except Exception as e:
            latency_ms = int((time.monotonic() - start) * 1000)
            logger.error(f"[Specialists] Health check failed after {latency_ms}ms: {e}")
            return {
                "status": "unhealthy",
                "error": str(e),
                "latency_ms": latency_ms,
                "base_url": self.config.base_url,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        latency_ms = int((time.monotonic() - start) * 1000)
        logger.info(f"[Specialists] Health check passed in {latency_ms}ms")
        return {
            "status": "healthy",
            "latency_ms": latency_ms,
            "base_url": self.config.base_url,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def shutdown(self, reason: str = "shutdown") -> bool:
        """Stop accepting calls and close the transport. Returns False if already shutting down."""
        if self._shutting_down:
            return False
        self._shutting_down = True
        logger.info(f"[Specialists] Shutdown initiated ({reason})")
        try:
            await self.client.aclose()
        except Exception as e:
            logger.error(f"[Specialists] Error during shutdown: {e}")
        logger.info(f"[Specialists] Shutdown complete: {self.session.get_sizes()}")
        return True
