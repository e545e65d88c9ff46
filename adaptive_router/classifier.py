"""Keyword-based task classification."""

from __future__ import annotations

from .request import RoutingRequest, TaskType


class TaskClassifier:
    """Classify requests into task types from the last message"""

    # Checked in order; the first category with a matching keyword wins
    TASK_KEYWORDS: tuple[tuple[TaskType, tuple[str, ...]], ...] = (
        (TaskType.CODE_GENERATION, ("code", "function", "implement", "debug", "fix")),
        (TaskType.CODE_REVIEW, ("review", "check", "analyze")),
        (TaskType.TRANSLATION, ("translate", "translation")),
        (TaskType.SUMMARIZATION, ("summarize", "summary")),
        (TaskType.CREATIVE_WRITING, ("write", "story", "creative")),
    )

    DEFAULT_TASK = TaskType.CHAT

    @classmethod
    def classify(cls, request: RoutingRequest) -> TaskType:
        """
        Infer the task type of a request.

        Only plain-text last messages are inspected; structured (multipart)
        content classifies as general chat. Matching is a case-insensitive
        substring test.
        """
        last_message = request.last_message
        if last_message is None:
            return cls.DEFAULT_TASK

        content = last_message.get("content")
        if not isinstance(content, str):
            return cls.DEFAULT_TASK

        return cls.classify_text(content)

    @classmethod
    def classify_text(cls, text: str) -> TaskType:
        lower_content = text.lower()
        for task_type, keywords in cls.TASK_KEYWORDS:
            if any(keyword in lower_content for keyword in keywords):
                return task_type
        return cls.DEFAULT_TASK


def resolve_task_type(request: RoutingRequest) -> TaskType:
    """Explicit task type if given, otherwise the classified one."""
    if request.task_type is not None:
        return request.task_type
    return TaskClassifier.classify(request)
