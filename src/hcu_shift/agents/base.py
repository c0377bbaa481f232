"""Base agent class."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)

_HANDLER_PREFIX = "_handle_"


class BaseAgent(ABC):
    """Abstract base class for all agents.

    An action ``foo`` is served by a ``_handle_foo(payload)`` method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Agent identifier."""

    @property
    def supported_actions(self) -> list[str]:
        return sorted(
            attr[len(_HANDLER_PREFIX):]
            for attr in dir(type(self))
            if attr.startswith(_HANDLER_PREFIX)
        )

    def process(self, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Process a request and return results.

        Args:
            action: The action to perform.
            payload: Action-specific data; models or their plain-dict dumps.

        Returns:
            Result dictionary.

        Raises:
            ValueError: If action is not supported.
        """
        handler = getattr(self, f"{_HANDLER_PREFIX}{action}", None)
        if handler is None:
            raise ValueError(
                f"Agent '{self.name}' does not support action '{action}' "
                f"(supported: {', '.join(self.supported_actions)})"
            )
        logger.debug("%s: %s", self.name, action)
        return handler(payload)
