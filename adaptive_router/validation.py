"""Request validation and log sanitization."""

import logging
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

VALID_ROLES = {"system", "user", "assistant", "function", "tool"}
CONTENT_PART_TYPES = {"text", "image_url", "image"}


class InputValidator:
    """Structural validation for routing requests"""

    @classmethod
    def validate_messages(cls, messages: Any) -> tuple[bool, str]:
        """Validate message array"""
        if not isinstance(messages, list) or not messages:
            return False, "Invalid messages: must be a non-empty list"

        for i, msg in enumerate(messages):
            if not isinstance(msg, Mapping):
                return False, f"Message {i} is not a mapping"

            if "role" not in msg or "content" not in msg:
                return False, f"Message {i} missing required fields"

            role = msg["role"]
            if not isinstance(role, str) or not role:
                return False, f"Message {i}: role must be a non-empty string"
            if role not in VALID_ROLES:
                # Providers may accept custom roles; pass them through
                logger.debug(f"Message {i} uses non-standard role: {role}")

            is_valid, error = cls.validate_content(msg["content"])
            if not is_valid:
                return False, f"Message {i}: {error}"

        return True, ""

    @classmethod
    def validate_content(cls, content: Any) -> tuple[bool, str]:
        """Content is plain text or a list of typed parts"""
        if isinstance(content, str):
            return True, ""

        if not isinstance(content, list):
            return False, "content must be a string or a list of parts"

        for j, part in enumerate(content):
            if not isinstance(part, Mapping) or "type" not in part:
                return False, f"content part {j} must be a mapping with a type"
            if part["type"] not in CONTENT_PART_TYPES:
                return False, f"content part {j} has unknown type {part['type']!r}"
            if part["type"] == "text" and not isinstance(part.get("text", ""), str):
                return False, f"content part {j} text must be a string"

        return True, ""

    @classmethod
    def sanitize_for_logging(cls, text: str, max_len: int = 100) -> str:
        """Sanitize text for safe logging (no sensitive data)"""
        if not text:
            return ""
        # Truncate and remove potential sensitive patterns
        sanitized = text[:max_len]
        # Redact anything that looks like an API key
        sanitized = re.sub(
            r"(sk-|api[_-]?key|bearer\s+)[a-zA-Z0-9\-_=:]{20,}",
            "[REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )
        return sanitized + ("..." if len(text) > max_len else "")


sanitize_for_logging = InputValidator.sanitize_for_logging
