"""HTTP client for the portfolio backend and snapshot loading helpers."""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from assistant.config import HTTP_TIMEOUT_SEC, PORTFOLIO_API_URL, SNAPSHOT_TTL_SEC
from assistant.schemas import KnowledgeSnapshot

LOGGER = logging.getLogger("portfolio_api")


class PortfolioAPIError(RuntimeError):
    """Raised when the backend cannot be reached or answers with an error."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class PortfolioAPISettings:
    base_url: str = PORTFOLIO_API_URL
    timeout: float = HTTP_TIMEOUT_SEC
    headers: Dict[str, str] = field(default_factory=lambda: {"Accept": "application/json"})


class PortfolioAPIClient:
    """Thin wrapper around the backend's read endpoints and AI query."""

    def __init__(
        self,
        settings: PortfolioAPISettings | None = None,
        *,
        session: requests.Session | None = None,
    ):
        self.settings = settings or PortfolioAPISettings()
        self.session = session or requests.Session()
        self.session.headers.update(self.settings.headers)

    @property
    def base_url(self) -> str:
        return self.settings.base_url.rstrip("/")

    def _request(self, method: str, path: str, *, what: str, json_body: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=json_body, timeout=self.settings.timeout)
        except requests.RequestException as exc:
            raise PortfolioAPIError(f"Failed to {what}: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise PortfolioAPIError(
                f"Failed to {what}: status={response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise PortfolioAPIError(f"Failed to {what}: invalid JSON") from exc

    # ------------------------------------------------------------------
    # Knowledge endpoints
    # ------------------------------------------------------------------
    def get_profile(self) -> Any:
        return self._request("GET", "/api/profile", what="fetch profile")

    def get_skill_groups(self) -> Any:
        return self._request("GET", "/api/skills", what="fetch skills")

    def get_experience(self) -> Any:
        return self._request("GET", "/api/experience", what="fetch experience")

    def get_education(self) -> Any:
        return self._request("GET", "/api/education", what="fetch education")

    def get_projects(self) -> Any:
        return self._request("GET", "/api/portfolio", what="fetch portfolios")

    # ------------------------------------------------------------------
    # AI query
    # ------------------------------------------------------------------
    def query_ai(self, question: str, context: Mapping[str, Any] | None = None) -> Dict[str, Any]:
        """POST the question to ``/api/ai-query`` and return the decoded body."""

        payload = {"question": question, "context": dict(context or {})}
        data = self._request("POST", "/api/ai-query", what="get AI response", json_body=payload)
        if not isinstance(data, dict):
            raise PortfolioAPIError("Failed to get AI response: unexpected payload")
        return data


_FETCHERS: tuple[tuple[str, str], ...] = (
    ("profile", "get_profile"),
    ("skills", "get_skill_groups"),
    ("experience", "get_experience"),
    ("education", "get_education"),
    ("projects", "get_projects"),
)


def load_snapshot(client: PortfolioAPIClient) -> KnowledgeSnapshot:
    """Fetch every knowledge endpoint in parallel and build a snapshot.

    A failing endpoint contributes an empty value; the rest of the snapshot
    is still usable.
    """

    payloads: Dict[str, Any] = {}
    with ThreadPoolExecutor(max_workers=len(_FETCHERS), thread_name_prefix="snapshot") as pool:
        futures = {key: pool.submit(getattr(client, method)) for key, method in _FETCHERS}
        for key, future in futures.items():
            try:
                payloads[key] = future.result()
            except PortfolioAPIError as exc:
                LOGGER.warning("snapshot fetch failed key=%s error=%s", key, exc)
                payloads[key] = None

    return KnowledgeSnapshot.from_payloads(**payloads)


class SnapshotCache:
    """Memoise the last loaded snapshot for ``ttl_seconds``."""

    def __init__(
        self,
        loader: Callable[[], KnowledgeSnapshot],
        ttl_seconds: float = SNAPSHOT_TTL_SEC,
        *,
        time_func: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl = max(0.0, float(ttl_seconds))
        self._time = time_func
        self._lock = threading.Lock()
        self._snapshot: Optional[KnowledgeSnapshot] = None
        self._loaded_at = 0.0

    def get(self) -> KnowledgeSnapshot:
        with self._lock:
            now = self._time()
            if self._snapshot is not None and now - self._loaded_at < self._ttl:
                return self._snapshot
            snapshot = self._loader()
            self._snapshot = snapshot
            self._loaded_at = now
            return snapshot

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None


__all__ = [
    "PortfolioAPIClient",
    "PortfolioAPIError",
    "PortfolioAPISettings",
    "SnapshotCache",
    "load_snapshot",
]
