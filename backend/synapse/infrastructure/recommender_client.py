"""Recommender Notifier — best-effort, fire-and-forget model refresh after onboarding.

Invariants:
    - Never raises into the caller: every failure is logged and swallowed here
    - Dispatched only after the triggering unit of work has committed
    - Each request has its own timeout, independent of any transaction timeout
    - Unconfigured (missing URL or API key) means skip with a warning, not fail
    - Success is exactly HTTP 202 Accepted

Design Decisions:
    - httpx.AsyncClient per request: the refresh is rare, a pooled client would
      outlive the event loop in tests (ADR: no long-lived state in the core)
    - Pending tasks kept in a set: asyncio only holds weak references to tasks, and
      drain() lets the lifespan wait for in-flight refreshes on shutdown
    - transport injectable so tests use httpx.MockTransport instead of a live server
"""

import asyncio
import logging

import httpx

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Internal-API-Key"


class RecommenderNotifier:
    """Sends the refresh signal to the recommendation service."""

    def __init__(
        self,
        base_url: str | None,
        api_key: str | None,
        refresh_path: str = "/refresh-model",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.refresh_path = refresh_path
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._pending: set[asyncio.Task] = set()

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    @property
    def endpoint(self) -> str:
        return self.base_url.rstrip("/") + "/" + self.refresh_path.lstrip("/")

    async def refresh_model(self) -> bool:
        """POST the refresh request. Returns True only on 202."""
        if not self.configured:
            logger.warning("Recommender URL or API key not configured, skipping refresh")
            return False
        logger.info(f"Notifying recommender at {self.endpoint}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport,
            ) as client:
                response = await client.post(
                    self.endpoint, headers={API_KEY_HEADER: self.api_key},
                )
        except httpx.HTTPError as e:
            logger.error(f"Recommender refresh failed: {e}")
            return False
        if response.status_code != httpx.codes.ACCEPTED:
            logger.error(
                f"Recommender refresh returned {response.status_code}: {response.text}",
            )
            return False
        logger.info("Recommender refresh accepted")
        return True

    def schedule_refresh(self) -> asyncio.Task | None:
        """Start refresh_model() in the background and return immediately."""
        if not self.configured:
            logger.warning("Recommender URL or API key not configured, skipping refresh")
            return None
        task = asyncio.create_task(self.refresh_model())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for in-flight refreshes (called on shutdown and in tests)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
