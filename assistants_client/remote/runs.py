#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Run orchestration

Posts the user message, starts a run, polls it to a terminal status and
reads back the newest assistant message. Run failures and timeouts are
not retried here; only the individual HTTP calls are.
"""
import asyncio
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..config.settings import BridgeConfig
from ..core.errors import NoTextResponseError, RunFailedError, RunTimeoutError
from ..core.logging import logger
from ..core.session import BridgeSession
from .api_client import AssistantsApiClient
from .models import FAILED_RUN_STATUSES, MessageList, Run, RunStatus, Thread
from .response import format_reply

PROGRESS_LOG_EVERY = 20
DEFAULT_IMAGE_DETAIL = "auto"
CONTEXT_SEPARATOR = "\n\n---\n\n"


@dataclass
class ImageInputs:
    urls: List[str] = field(default_factory=list)
    file_ids: List[str] = field(default_factory=list)
    base64_images: List[str] = field(default_factory=list)
    detail: str = DEFAULT_IMAGE_DETAIL

    @property
    def count(self) -> int:
        return len(self.urls) + len(self.file_ids) + len(self.base64_images)


def combine_context(prompt: str, context: Optional[str] = None) -> str:
    return f"{context}{CONTEXT_SEPARATOR}{prompt}" if context else prompt


def detect_base64_mime(data: str) -> str:
    """Best-guess image MIME type from the leading base64 characters."""
    if data.startswith("/9j/"):
        return "image/jpeg"
    if data.startswith("R0lGOD"):
        return "image/gif"
    if data.startswith("UklGR"):
        return "image/webp"
    return "image/png"


def build_message_content(
    message: str,
    image_urls: Sequence[str] = (),
    image_file_ids: Sequence[str] = (),
    image_base64: Sequence[str] = (),
    detail: str = DEFAULT_IMAGE_DETAIL,
) -> List[Dict[str, Any]]:
    """Image parts first, then exactly one text part."""
    content: List[Dict[str, Any]] = []
    for url in image_urls:
        content.append({"type": "image_url", "image_url": {"url": url, "detail": detail}})
    for file_id in image_file_ids:
        content.append({"type": "image_file", "image_file": {"file_id": file_id, "detail": detail}})
    for data in image_base64:
        data_url = f"data:{detect_base64_mime(data)};base64,{data}"
        content.append({"type": "image_url", "image_url": {"url": data_url, "detail": detail}})
    content.append({"type": "text", "text": message})
    return content


class RunOrchestrator:
    def __init__(self, client: AssistantsApiClient, session: BridgeSession, config: BridgeConfig):
        self.client = client
        self.session = session
        self.config = config

    @property
    def max_iterations(self) -> int:
        return math.ceil(self.config.poll_timeout_ms / self.config.poll_interval_ms)

    async def get_or_create_thread(self, tool_name: str) -> str:
        existing = self.session.thread_by_tool.get(tool_name)
        if existing:
            logger.debug(f"Using existing thread for {tool_name}: {existing}")
            return existing

        logger.info(f"Creating new thread for {tool_name}")
        thread = Thread(**await self.client.request("/threads", {}))
        self.session.thread_by_tool.set(tool_name, thread.id)
        logger.info(f"Thread created for {tool_name}: {thread.id}")
        return thread.id

    async def post_user_message(self, thread_id: str, content: List[Dict[str, Any]]) -> None:
        await self.client.request(f"/threads/{thread_id}/messages", {"role": "user", "content": content})

    async def create_run(self, thread_id: str, assistant_id: str, vector_store_id: Optional[str] = None) -> Run:
        body: Dict[str, Any] = {"assistant_id": assistant_id}
        if vector_store_id:
            body["tool_resources"] = {"file_search": {"vector_store_ids": [vector_store_id]}}
        run = Run(**await self.client.request(f"/threads/{thread_id}/runs", body))
        logger.info(f"Run created: {run.id} on thread {thread_id} (status={run.status})")
        return run

    async def wait_for_run(self, thread_id: str, run: Run) -> Run:
        """Poll until completed; raise on failure statuses or when the budget runs out."""
        current = run
        interval_s = self.config.poll_interval_ms / 1000
        for i in range(self.max_iterations):
            await asyncio.sleep(interval_s)
            current = Run(**await self.client.get(f"/threads/{thread_id}/runs/{run.id}"))

            if current.status == RunStatus.COMPLETED.value:
                logger.info(f"Run completed: {run.id} after {i + 1} polls")
                if current.usage:
                    logger.info(
                        f"Run usage: prompt={current.usage.prompt_tokens} "
                        f"completion={current.usage.completion_tokens} total={current.usage.total_tokens}"
                    )
                return current

            if current.status in FAILED_RUN_STATUSES:
                last_error = current.last_error.model_dump() if current.last_error else None
                logger.error(f"Run failed: {run.id} status={current.status} error={last_error}")
                raise RunFailedError(run.id, current.status, last_error)

            if i > 0 and i % PROGRESS_LOG_EVERY == 0:
                logger.debug(f"Run still in progress: {run.id} status={current.status} iteration={i}")

        logger.error(f"Run timed out: {run.id} last status={current.status}")
        raise RunTimeoutError(run.id, self.config.poll_timeout_ms, current.status)

    async def fetch_reply_text(self, thread_id: str) -> str:
        data = await self.client.get(f"/threads/{thread_id}/messages", {"limit": self.config.messages_limit})
        messages = MessageList(**data)
        latest = messages.data[0] if messages.data else None
        text = latest.first_text() if latest else None
        if text is None:
            raise NoTextResponseError()
        return text

    async def run_assistant_on_thread(
        self,
        assistant_id: str,
        thread_id: str,
        message: str,
        vector_store_id: Optional[str] = None,
        images: Optional[ImageInputs] = None,
    ) -> str:
        images = images or ImageInputs()
        logger.info(
            f"Running assistant {assistant_id} on thread {thread_id} "
            f"(vector_store={bool(vector_store_id)}, images={images.count})"
        )

        content = build_message_content(
            message, images.urls, images.file_ids, images.base64_images, images.detail
        )
        if images.count:
            logger.debug(f"Added {images.count} images to message (detail={images.detail})")

        await self.post_user_message(thread_id, content)
        run = await self.create_run(thread_id, assistant_id, vector_store_id)
        await self.wait_for_run(thread_id, run)

        return format_reply(await self.fetch_reply_text(thread_id))
