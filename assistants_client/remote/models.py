from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class RunStatus(str, Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    EXPIRED = "expired"


FAILED_RUN_STATUSES = frozenset({
    RunStatus.FAILED.value,
    RunStatus.CANCELLED.value,
    RunStatus.EXPIRED.value,
})


class RunError(BaseModel):
    code: Optional[str] = None
    message: Optional[str] = None


class RunUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Run(BaseModel):
    id: str
    thread_id: Optional[str] = None
    assistant_id: Optional[str] = None
    status: str
    last_error: Optional[RunError] = None
    usage: Optional[RunUsage] = None


class Thread(BaseModel):
    id: str


class VectorStore(BaseModel):
    id: str
    name: Optional[str] = None


class UploadedFile(BaseModel):
    id: str
    filename: Optional[str] = None
    purpose: Optional[str] = None


class Message(BaseModel):
    id: Optional[str] = None
    role: Optional[str] = None
    content: List[Dict[str, Any]] = []

    def first_text(self) -> Optional[str]:
        for part in self.content:
            if isinstance(part, dict) and part.get("type") == "text":
                text = part.get("text")
                if isinstance(text, dict) and isinstance(text.get("value"), str):
                    return text["value"]
                if isinstance(text, str):
                    return text
        return None


class MessageList(BaseModel):
    data: List[Message] = []
    has_more: bool = False
