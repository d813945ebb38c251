from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import requests

logger = logging.getLogger(__name__)


def subscriber_id_for(user_id: int) -> str:
    return f"user_{int(user_id)}"


class Notifier(Protocol):
    def notify(self, subscriber_id: str, template_id: str, payload: Dict[str, Any]) -> None:
        """Deliver one notification; raise on delivery failure."""

        raise NotImplementedError


class LoggingNotifier:
    """Fallback used when no delivery service is configured."""

    def notify(self, subscriber_id: str, template_id: str, payload: Dict[str, Any]) -> None:
        logger.info("notification %s -> %s: %s", template_id, subscriber_id, payload.get("body", ""))


class NovuNotifier:
    """Triggers a Novu workflow per notification through the events API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.novu.co",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._api_key = api_key
        self._url = base_url.rstrip("/") + "/v1/events/trigger"
        self._timeout = float(timeout)
        self._session = session or requests.Session()

    def notify(self, subscriber_id: str, template_id: str, payload: Dict[str, Any]) -> None:
        resp = self._session.post(
            self._url,
            json={"name": template_id, "to": {"subscriberId": subscriber_id}, "payload": payload},
            headers={"Authorization": f"ApiKey {self._api_key}"},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        logger.debug("novu trigger %s -> %s: %s", template_id, subscriber_id, resp.status_code)


def build_notifier(*, api_key: str, base_url: str, timeout: float) -> Notifier:
    if not api_key:
        return LoggingNotifier()
    return NovuNotifier(api_key, base_url=base_url, timeout=timeout)
