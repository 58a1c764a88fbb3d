"""Channel router between the UI process and the controllers.

Channels are named ``"<entity>:<operation>"`` (e.g. ``"class:create"``).
``invoke`` always returns a JSON-safe envelope dict.
"""

import inspect
import logging
from typing import Any, Callable

from schooldesk.schemas.envelope import ApiResponse, api_error

logger = logging.getLogger(__name__)


class IpcRouter:
    """Registry of request handlers keyed by channel name."""

    def __init__(self):
        self._handlers: dict[str, Callable[..., ApiResponse]] = {}

    def handle(self, channel: str, handler: Callable[..., ApiResponse]) -> None:
        """Register handler for channel.

        Raises:
            ValueError: If the channel already has a handler
        """
        if channel in self._handlers:
            raise ValueError(f"Channel already registered: {channel}")
        self._handlers[channel] = handler

    def channels(self) -> list[str]:
        return sorted(self._handlers)

    def invoke(self, channel: str, *args: Any) -> dict[str, Any]:
        """Dispatch a request and return the envelope as a plain dict."""
        handler = self._handlers.get(channel)
        if handler is None:
            logger.warning("Request for unknown channel %r", channel)
            return api_error(f"Unknown channel: {channel}").model_dump(mode="json")

        try:
            inspect.signature(handler).bind(*args)
        except TypeError as e:
            return api_error(f"Invalid arguments for {channel}: {e}").model_dump(mode="json")

        logger.debug("ipc %s args=%r", channel, args)
        response = handler(*args)
        return response.model_dump(mode="json", by_alias=True)


__all__ = ["IpcRouter"]
