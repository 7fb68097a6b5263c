#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Error types raised by the Assistants bridge

Each error carries a short category name so the tool surface can tell
the caller which kind of failure ended the invocation.
"""
import json
from typing import Any, Dict, Iterable, Optional

RETRYABLE_STATUS_CODES = frozenset({429, 500, 503})
HTTP_CONFLICT = 409


class BridgeError(Exception):
    category = "bridge"


class ConfigurationError(BridgeError):
    category = "configuration"

    def __init__(self, message: str, missing: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.missing = list(missing or [])


class InvalidInputError(BridgeError):
    category = "validation"


class PathTraversalError(InvalidInputError):
    def __init__(self, file_path: str, root: str):
        super().__init__(
            f'File path "{file_path}" is outside the allowed directory. '
            f"Files must be within: {root}"
        )
        self.file_path = file_path
        self.root = root


class MissingFileError(InvalidInputError):
    def __init__(self, file_path: str, absolute: str):
        super().__init__(f'File not found or not a regular file: "{file_path}" (resolved to {absolute})')
        self.file_path = file_path
        self.absolute = absolute


class UnsupportedImageError(InvalidInputError):
    def __init__(self, extension: str, supported: Iterable[str]):
        super().__init__(
            f"Unsupported image format: {extension or '(none)'}. "
            f"Supported formats: {', '.join(supported)}"
        )
        self.extension = extension


class UnknownToolError(InvalidInputError):
    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class HttpError(BridgeError):
    """Non-success response from the remote service."""

    def __init__(self, message: str, status_code: int, response_body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body

    @property
    def category(self) -> str:  # type: ignore[override]
        return "transient" if self.status_code in RETRYABLE_STATUS_CODES else "remote"


class RunFailedError(BridgeError):
    category = "run_failed"

    def __init__(self, run_id: str, status: str, last_error: Optional[Dict[str, Any]] = None):
        details = json.dumps(last_error) if last_error else "No error details"
        super().__init__(f"Run ended with status: {status}. {details}")
        self.run_id = run_id
        self.status = status
        self.last_error = last_error


class RunTimeoutError(BridgeError):
    category = "timeout"

    def __init__(self, run_id: str, timeout_ms: int, last_status: str):
        super().__init__(f"Run timed out after {timeout_ms}ms (last status: {last_status})")
        self.run_id = run_id
        self.timeout_ms = timeout_ms
        self.last_status = last_status


class NoTextResponseError(BridgeError):
    category = "protocol"

    def __init__(self, message: str = "No text response found from assistant"):
        super().__init__(message)


class BridgeShuttingDownError(BridgeError):
    category = "shutdown"

    def __init__(self, message: str = "Bridge is shutting down and no longer accepts invocations"):
        super().__init__(message)
