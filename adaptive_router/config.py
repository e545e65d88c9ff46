"""
Router Configuration
====================
RouterConfig plus loading of the optional user config file and logging setup.

The user config lives at ``~/.adaptive_router/config.json``::

    {
        "routing": {
            "priorityOrder": ["ollama", "openai", "anthropic"],
            "fallbackEnabled": true,
            "costOptimization": false,
            "privacyFirst": true,
            "preferredVisionProvider": "ollama",
            "timeouts": {"openai": 60}
        },
        "logging": {"level": "INFO", "file": "~/.adaptive_router/router.log"}
    }
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError
from .providers import BaseProvider

CONFIG_DIR = Path.home() / ".adaptive_router"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_PREFERRED_VISION_PROVIDER = "ollama"


def _normalize_providers(
    providers: Mapping[str, BaseProvider] | Iterable[BaseProvider],
) -> dict[str, BaseProvider]:
    if isinstance(providers, Mapping):
        return dict(providers)

    normalized: dict[str, BaseProvider] = {}
    for provider in providers:
        if provider.name in normalized:
            raise ConfigurationError(
                f"Duplicate provider name: {provider.name}", provider=provider.name
            )
        normalized[provider.name] = provider
    return normalized


@dataclass
class RouterConfig:
    """
    Provider set and routing policy.

    ``providers`` keeps registration order, which is the tie-break order for
    scoring and the fallback order when ``priority_order`` is not given.
    """

    providers: dict[str, BaseProvider] = field(default_factory=dict)
    priority_order: list[str] | None = None
    fallback_enabled: bool = True
    cost_optimization: bool = False
    privacy_first: bool = False
    preferred_vision_provider: str | None = DEFAULT_PREFERRED_VISION_PROVIDER
    # Per-provider call deadline in seconds; absent means the provider's own
    call_timeouts: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.providers = _normalize_providers(self.providers)
        if self.priority_order is not None:
            self.priority_order = list(self.priority_order)
        self.call_timeouts = dict(self.call_timeouts)
        self.validate()

    def validate(self) -> None:
        if self.priority_order is not None:
            seen: set[str] = set()
            for name in self.priority_order:
                if name not in self.providers:
                    raise ConfigurationError(
                        f"Priority order references unregistered provider: {name}",
                        provider=name,
                    )
                if name in seen:
                    raise ConfigurationError(
                        f"Priority order lists provider twice: {name}", provider=name
                    )
                seen.add(name)

        for name, timeout in self.call_timeouts.items():
            if not isinstance(timeout, (int, float)) or timeout <= 0:
                raise ConfigurationError(
                    f"Timeout for {name} must be a positive number", provider=name
                )

    def fallback_order(self) -> list[str]:
        if self.priority_order is not None:
            return list(self.priority_order)
        return list(self.providers)

    def timeout_for(self, provider: str) -> float | None:
        return self.call_timeouts.get(provider)

    @classmethod
    def from_user_config(
        cls,
        providers: Mapping[str, BaseProvider] | Iterable[BaseProvider],
        user_config: dict[str, Any] | None = None,
        *,
        fallback_enabled: bool | None = None,
        cost_optimization: bool | None = None,
        privacy_first: bool | None = None,
    ) -> RouterConfig:
        """Build a config from the ``routing`` section; explicit arguments win."""
        routing = _get_section(user_config or {}, "routing")

        priority_order = routing.get("priorityOrder")
        if not isinstance(priority_order, list) or not all(
            isinstance(name, str) for name in priority_order
        ):
            priority_order = None

        preferred_vision = routing.get("preferredVisionProvider")
        if not isinstance(preferred_vision, str) or not preferred_vision.strip():
            preferred_vision = DEFAULT_PREFERRED_VISION_PROVIDER

        timeouts = routing.get("timeouts")
        call_timeouts = (
            {
                name: float(value)
                for name, value in timeouts.items()
                if isinstance(value, (int, float)) and not isinstance(value, bool)
            }
            if isinstance(timeouts, dict)
            else {}
        )

        return cls(
            providers=_normalize_providers(providers),
            priority_order=priority_order,
            fallback_enabled=_resolve_bool_config(
                fallback_enabled, routing, "fallbackEnabled", default=True
            ),
            cost_optimization=_resolve_bool_config(
                cost_optimization, routing, "costOptimization"
            ),
            privacy_first=_resolve_bool_config(privacy_first, routing, "privacyFirst"),
            preferred_vision_provider=preferred_vision.strip(),
            call_timeouts=call_timeouts,
        )


def _get_section(user_config: dict[str, Any], key: str) -> dict[str, Any]:
    section = user_config.get(key, {})
    if isinstance(section, dict):
        return section
    return {}


def _resolve_bool_config(
    value: bool | None, section: dict[str, Any], key: str, default: bool = False
) -> bool:
    if value is not None:
        return value

    config_value = section.get(key)
    if isinstance(config_value, bool):
        return config_value

    return default


def load_user_config(path: Path | None = None) -> dict[str, Any]:
    config_path = path or CONFIG_FILE
    if not config_path.exists():
        return {}

    try:
        with config_path.open("r", encoding="utf-8") as config_file:
            loaded = json.load(config_file)
    except Exception as exc:
        # Can't log yet as logging isn't set up, use print
        print(f"Warning: Failed to load config from {config_path}: {exc}")
        return {}

    if not isinstance(loaded, dict):
        print(f"Warning: Config file {config_path} did not contain an object.")
        return {}

    return loaded


def setup_logging(user_config: dict[str, Any] | None = None, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO

    # Check config for logging overrides
    log_config = _get_section(user_config or {}, "logging")
    if not verbose and isinstance(log_config.get("level"), str):
        level_name = log_config["level"].upper()
        level = getattr(logging, level_name, logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    # Add file handler if configured
    log_file = log_config.get("file")
    if log_file:
        try:
            expanded_path = os.path.expanduser(log_file)
            handlers.append(logging.FileHandler(expanded_path, encoding="utf-8"))
        except OSError as e:
            # Fallback to console only if file setup fails
            print(f"Failed to setup log file {log_file}: {e}")

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )
