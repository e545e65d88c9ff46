"""
Routing Request Types
=====================
The inbound request record and helpers for reading message content.

Messages follow the chat-completions shape: ``{"role": ..., "content": ...}``
where content is either a plain string or a list of typed parts::

    {"type": "text", "text": "..."}
    {"type": "image_url", "image_url": {"url": "data:image/png;base64,..."}}
    {"type": "image", "image": b"..."}
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

IMAGE_PART_TYPES = {"image_url", "image"}

# Rough estimation: 1 token ~ 4 characters
CHARS_PER_TOKEN = 4


class TaskType(Enum):
    """Coarse intent categories used to bias scoring"""

    CHAT = "chat"
    CODE_GENERATION = "code_generation"
    CODE_REVIEW = "code_review"
    VISION_ANALYSIS = "vision_analysis"
    TRANSLATION = "translation"
    SUMMARIZATION = "summarization"
    QUESTION_ANSWERING = "question_answering"
    CREATIVE_WRITING = "creative_writing"
    DATA_EXTRACTION = "data_extraction"
    EMBEDDING = "embedding"


@dataclass
class RoutingRequest:
    """A unit of work to be routed to a provider"""

    messages: list[dict[str, Any]]
    task_type: TaskType | None = None
    prefer_local: bool = False
    preferred_provider: str | None = None
    image: bytes | str | None = None
    has_image: bool = False
    # Sampling parameters etc., passed verbatim to the provider
    options: dict[str, Any] = field(default_factory=dict)
    # Language/framework hints, not interpreted by the router
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.task_type, str):
            self.task_type = TaskType(self.task_type)

    @property
    def is_image_bearing(self) -> bool:
        if self.has_image or self.image is not None:
            return True
        return any(_has_image_part(msg.get("content")) for msg in self.messages)

    @property
    def last_message(self) -> dict[str, Any] | None:
        return self.messages[-1] if self.messages else None

    @property
    def image_payload(self) -> bytes | str | None:
        """
        Image to hand to a vision provider.

        The explicit ``image`` wins; otherwise the first image part found in
        the messages supplies it (an ``image_url`` part yields its URL).
        """
        if self.image is not None:
            return self.image

        for msg in self.messages:
            content = msg.get("content")
            if not isinstance(content, list):
                continue
            for part in content:
                payload = _image_part_payload(part)
                if payload:
                    return payload
        return None


def _has_image_part(content: Any) -> bool:
    if not isinstance(content, list):
        return False
    return any(
        isinstance(part, Mapping) and part.get("type") in IMAGE_PART_TYPES
        for part in content
    )


def _image_part_payload(part: Any) -> bytes | str | None:
    if not isinstance(part, Mapping):
        return None

    if part.get("type") == "image":
        return part.get("image")

    if part.get("type") == "image_url":
        image_url = part.get("image_url")
        if isinstance(image_url, Mapping):
            return image_url.get("url")
        if isinstance(image_url, str):
            return image_url

    return None


def content_text(content: Any) -> str:
    """Concatenate the text of a message content (string or parts)."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "\n".join(
            part.get("text") or ""
            for part in content
            if isinstance(part, Mapping) and part.get("type") == "text"
        )
    return ""


def estimate_token_count(messages: list[dict[str, Any]]) -> int:
    """Estimate the token footprint of all text content in a conversation."""
    total_chars = 0
    for message in messages:
        content = message.get("content")
        if isinstance(content, str):
            total_chars += len(content)
        elif isinstance(content, list):
            for part in content:
                if isinstance(part, Mapping) and part.get("type") == "text":
                    total_chars += len(part.get("text") or "")

    return math.ceil(total_chars / CHARS_PER_TOKEN)
