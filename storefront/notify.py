"""User notifications and fire-and-forget diagnostics."""

import threading
from typing import List, Optional

import requests  # type: ignore[import-untyped]

from storefront.config import REQUEST_TIMEOUT
from storefront.logging_config import get_logger

__all__ = ["Notifier", "send_ntfy_notification"]

logger = get_logger("notify")


class Notifier:
    """Collects user-facing toast messages.

    Toasts never block and never fail; each one is also logged.
    """

    def __init__(self) -> None:
        self.messages: List[str] = []

    def show(self, message: str) -> None:
        self.messages.append(message)
        logger.info(f"Notification: {message}")

    def clear(self) -> None:
        self.messages.clear()


def _post(url: str, message: str, session: Optional[requests.Session]) -> None:
    try:
        poster = session or requests
        poster.post(url, data=message.encode("utf-8"), timeout=REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.debug(f"Diagnostic notification to {url} failed: {e}")


def send_ntfy_notification(
    url: Optional[str],
    message: str,
    session: Optional[requests.Session] = None,
    wait: bool = False,
) -> Optional[threading.Thread]:
    """POST a diagnostic message to a push-notification topic.

    Runs in a daemon thread so the caller never waits on it. Failures are
    logged at debug level and dropped. Nothing is sent without a URL.

    Args:
        url: Notification endpoint (e.g. https://ntfy.sh/my-topic)
        message: Plain-text body
        session: Optional requests.Session
        wait: Join the thread before returning (for callers that exit right away)

    Returns:
        The sending thread, or None when no URL is configured
    """
    if not url:
        return None
    thread = threading.Thread(target=_post, args=(url, message, session), daemon=True)
    thread.start()
    if wait:
        thread.join()
    return thread
