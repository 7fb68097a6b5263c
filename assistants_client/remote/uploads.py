#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Upload and vector store attachment pipeline

Local paths are validated against the working directory before any I/O.
Uploads are deduplicated by absolute path; documents and vision images
use separate registries because the remote treats the two purposes
differently.
"""
import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..core.errors import HTTP_CONFLICT, HttpError, MissingFileError, PathTraversalError, UnsupportedImageError
from ..core.logging import logger
from ..core.session import BridgeSession
from .api_client import AssistantsApiClient
from .models import UploadedFile, VectorStore

PURPOSE_ASSISTANTS = "assistants"
PURPOSE_VISION = "vision"

VISION_IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")

VECTOR_STORE_NAME_PREFIX = "specialists-"


def validate_file_path(file_path: str, root: Optional[Path] = None) -> Path:
    """Resolve ``file_path``; it must be an existing regular file under ``root`` (default: cwd)."""
    base = (root or Path.cwd()).resolve()
    absolute = (base / Path(file_path).expanduser()).resolve()
    if not absolute.is_relative_to(base):
        raise PathTraversalError(file_path, str(base))
    if not absolute.is_file():
        raise MissingFileError(file_path, str(absolute))
    return absolute


def validate_image_path(file_path: str, root: Optional[Path] = None) -> Path:
    absolute = validate_file_path(file_path, root)
    ext = absolute.suffix.lower()
    if ext not in VISION_IMAGE_EXTENSIONS:
        raise UnsupportedImageError(ext, VISION_IMAGE_EXTENSIONS)
    return absolute


def _unique(paths: Sequence[Path]) -> List[Path]:
    return list(dict.fromkeys(paths))


class FileUploader:
    def __init__(self, client: AssistantsApiClient, session: BridgeSession, root: Optional[Path] = None):
        self.client = client
        self.session = session
        self.root = root

    def validate_inputs(self, file_paths: Sequence[str], image_paths: Sequence[str]) -> None:
        """Reject bad paths up front so no remote call is made for an invalid request."""
        for p in file_paths:
            validate_file_path(p, self.root)
        for p in image_paths:
            validate_image_path(p, self.root)

    async def _upload(self, absolute: Path, purpose: str) -> str:
        content = await asyncio.to_thread(absolute.read_bytes)
        logger.info(f"Uploading {absolute} ({len(content)} bytes, purpose={purpose})")
        data = await self.client.upload_file(absolute.name, content, purpose)
        uploaded = UploadedFile(**data)
        logger.info(f"File uploaded: {absolute} -> {uploaded.id}")
        return uploaded.id

    async def upload_document(self, file_path: str) -> str:
        absolute = validate_file_path(file_path, self.root)
        return await self._upload_document_validated(absolute)

    async def _upload_document_validated(self, absolute: Path) -> str:
        key = str(absolute)
        cached = self.session.uploaded_file_by_path.get(key)
        if cached:
            logger.debug(f"Using cached file: {key} -> {cached}")
            return cached
        file_id = await self._upload(absolute, PURPOSE_ASSISTANTS)
        self.session.uploaded_file_by_path.set(key, file_id)
        return file_id

    async def _upload_image_validated(self, absolute: Path) -> str:
        key = str(absolute)
        cached = self.session.uploaded_vision_file_by_path.get(key)
        if cached:
            logger.debug(f"Using cached vision file: {key} -> {cached}")
            return cached
        file_id = await self._upload(absolute, PURPOSE_VISION)
        self.session.uploaded_vision_file_by_path.set(key, file_id)
        return file_id

    async def upload_images_for_vision(self, file_paths: Sequence[str]) -> List[str]:
        """Upload images concurrently; ids come back in input order."""
        absolutes = [validate_image_path(p, self.root) for p in file_paths]
        unique = _unique(absolutes)
        ids = await asyncio.gather(*(self._upload_image_validated(p) for p in unique))
        by_path: Dict[Path, str] = dict(zip(unique, ids))
        return [by_path[p] for p in absolutes]

    async def get_or_create_vector_store(self, tool_name: str) -> str:
        existing = self.session.vector_store_by_tool.get(tool_name)
        if existing:
            logger.debug(f"Using existing vector store for {tool_name}: {existing}")
            return existing

        logger.info(f"Creating new vector store for {tool_name}")
        data = await self.client.request("/vector_stores", {"name": f"{VECTOR_STORE_NAME_PREFIX}{tool_name}"})
        vector_store = VectorStore(**data)
        self.session.vector_store_by_tool.set(tool_name, vector_store.id)
        logger.info(f"Vector store created for {tool_name}: {vector_store.id}")
        return vector_store.id

    async def add_file_to_vector_store(self, vector_store_id: str, file_id: str) -> None:
        try:
            await self.client.request(f"/vector_stores/{vector_store_id}/files", {"file_id": file_id})
        except HttpError as e:
            if e.status_code == HTTP_CONFLICT:
                logger.debug(f"File {file_id} already attached to vector store {vector_store_id}")
                return
            raise
        logger.debug(f"File {file_id} added to vector store {vector_store_id}")

    async def ensure_files_in_vector_store(self, tool_name: str, file_paths: Sequence[str]) -> str:
        """Upload new files and attach all of them to the tool's vector store.

        Every path is validated before the first network call. Uploads and
        attachments each run concurrently; a non-conflict attach error fails
        the batch, but files already uploaded stay cached for the next call.
        """
        absolutes = _unique([validate_file_path(p, self.root) for p in file_paths])

        file_ids = await asyncio.gather(*(self._upload_document_validated(p) for p in absolutes))

        vector_store_id = await self.get_or_create_vector_store(tool_name)
        await asyncio.gather(*(self.add_file_to_vector_store(vector_store_id, fid) for fid in file_ids))

        logger.info(f"Files processed for vector store: tool={tool_name} vector_store={vector_store_id} files={len(absolutes)}")
        return vector_store_id
