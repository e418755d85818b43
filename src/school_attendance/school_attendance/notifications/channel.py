from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

logger = logging.getLogger(__name__)


class PushChannel(Protocol):
    """External push delivery collaborator.

    Returns True on success. A False return or any raised exception counts
    as a failed delivery for that one recipient. Retries, backoff, device
    tokens and timeouts belong to the channel.
    """

    def deliver(self, user_id: str, title: str, body: str, data: Mapping[str, Any]) -> bool:
        raise NotImplementedError


class LoggingPushChannel:
    """Channel for development: records the push in the log and reports success."""

    def deliver(self, user_id: str, title: str, body: str, data: Mapping[str, Any]) -> bool:
        logger.info("push -> %s: %s (%s)", user_id, title, data.get("type"))
        return True
