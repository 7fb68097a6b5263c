#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
In-memory session state for the Assistants bridge

Holds the bounded caches that give every specialist tool its own thread
and vector store, plus the global upload registries.
"""
from dataclasses import dataclass
from typing import Any, Dict

from .cache import BoundedCache
from .logging import logger


@dataclass
class ResetCounts:
    threads: int = 0
    vector_stores: int = 0
    uploaded_files: int = 0
    vision_files: int = 0


class BridgeSession:
    """
    Tool-keyed conversation state and path-keyed upload registries.
    Nothing here survives a restart.
    """

    def __init__(self, max_cache_size: int):
        self.max_cache_size = max_cache_size
        # tool name -> thread id
        self.thread_by_tool: BoundedCache[str, str] = BoundedCache(max_cache_size, "thread_by_tool")
        # tool name -> vector store id
        self.vector_store_by_tool: BoundedCache[str, str] = BoundedCache(max_cache_size, "vector_store_by_tool")
        # absolute path -> file id (purpose=assistants)
        self.uploaded_file_by_path: BoundedCache[str, str] = BoundedCache(max_cache_size, "uploaded_file_by_path")
        # absolute path -> file id (purpose=vision)
        self.uploaded_vision_file_by_path: BoundedCache[str, str] = BoundedCache(
            max_cache_size, "uploaded_vision_file_by_path"
        )
        logger.info(f"BridgeSession initialized with max_cache_size={max_cache_size}")

    def reset_thread(self, tool_name: str) -> bool:
        removed = self.thread_by_tool.delete(tool_name)
        logger.info(f"Thread reset for {tool_name} (had thread: {removed})")
        return removed

    def reset_vector_store(self, tool_name: str) -> bool:
        removed = self.vector_store_by_tool.delete(tool_name)
        logger.info(f"Vector store reset for {tool_name} (had vector store: {removed})")
        return removed

    def reset_all(self) -> ResetCounts:
        counts = ResetCounts(
            threads=self.thread_by_tool.clear(),
            vector_stores=self.vector_store_by_tool.clear(),
            uploaded_files=self.uploaded_file_by_path.clear(),
            vision_files=self.uploaded_vision_file_by_path.clear(),
        )
        logger.info(
            f"All specialists reset: threads={counts.threads} vector_stores={counts.vector_stores} "
            f"uploaded_files={counts.uploaded_files} vision_files={counts.vision_files}"
        )
        return counts

    def get_stats(self) -> Dict[str, Any]:
        return {
            "threads": self.thread_by_tool.to_dict(),
            "vector_stores": self.vector_store_by_tool.to_dict(),
            "uploaded_files": len(self.uploaded_file_by_path),
            "uploaded_vision_files": len(self.uploaded_vision_file_by_path),
        }

    def get_sizes(self) -> Dict[str, int]:
        return {
            "threads": len(self.thread_by_tool),
            "vector_stores": len(self.vector_store_by_tool),
            "uploaded_files": len(self.uploaded_file_by_path),
            "uploaded_vision_files": len(self.uploaded_vision_file_by_path),
        }
