"""HTTP catalog reader - implements ICatalogReader against the catalog service.

Key Features:
- Retry logic (3 attempts, exponential backoff) on transport and 5xx errors
- Circuit breaker (5 failures -> 60s open)
- 404 maps to "not found" (None), every other failure to CatalogUnavailableError
"""
# mypy: warn-unused-ignores=False

import logging
from typing import Any, Optional

import httpx
from circuitbreaker import CircuitBreakerError, circuit
from pydantic import ValidationError as PayloadValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from domain.catalog.entities import CatalogMeal, CatalogPlan, ScheduleEntry
from domain.catalog.ports import ICatalogReader
from domain.subscription.core.exceptions import CatalogUnavailableError

from .models import MealPayload, PlanPayload, SchedulePayload

logger = logging.getLogger(__name__)


class CatalogServerError(httpx.HTTPError):
    """5xx response from the catalog service (retryable)."""


class HttpCatalogReader(ICatalogReader):
    """
    Catalog reader backed by the catalog service REST API.

    Endpoints:
        GET {base_url}/plans/{plan_id}
        GET {base_url}/plans/{plan_id}/schedule
        GET {base_url}/meals/{meal_id}

    Example:
        >>> async with HttpCatalogReader("http://catalog:8080") as catalog:
        ...     plan = await catalog.get_plan("plan-1")
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._transport = transport
        self._session: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpCatalogReader":
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _ensure_session(self) -> httpx.AsyncClient:
        if self._session is None:
            self._session = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout_s),
                transport=self._transport,
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.aclose()
            self._session = None

    @retry(  # type: ignore[misc]
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TransportError, CatalogServerError)),
        reraise=True,
    )
    async def _get_json(self, path: str) -> Optional[Any]:
        """GET path and decode JSON. Returns None on 404."""
        response = await self._ensure_session().get(path)
        if response.status_code == 404:
            return None
        if response.status_code >= 500:
            logger.warning(
                "Catalog server error",
                extra={"path": path, "status": response.status_code},
            )
            raise CatalogServerError(f"Catalog returned {response.status_code} for {path}")
        response.raise_for_status()
        return response.json()

    @circuit(  # type: ignore[misc]
        failure_threshold=5, recovery_timeout=60, name="catalog_read"
    )
    async def _guarded_get(self, path: str) -> Optional[Any]:
        return await self._get_json(path)

    async def _read(self, path: str, plan_id: str) -> Optional[Any]:
        try:
            return await self._guarded_get(path)
        except CircuitBreakerError as e:
            logger.error("Catalog circuit open", extra={"path": path})
            raise CatalogUnavailableError(plan_id, e) from e
        except httpx.HTTPError as e:
            logger.error("Catalog request failed", extra={"path": path, "error": str(e)})
            raise CatalogUnavailableError(plan_id, e) from e

    async def get_plan(self, plan_id: str) -> Optional[CatalogPlan]:
        data = await self._read(f"/plans/{plan_id}", plan_id)
        if data is None:
            return None
        try:
            return PlanPayload.model_validate(data).to_domain()
        except PayloadValidationError as e:
            raise CatalogUnavailableError(plan_id, e) from e

    async def get_plan_schedule(self, plan_id: str) -> list[ScheduleEntry]:
        data = await self._read(f"/plans/{plan_id}/schedule", plan_id)
        if data is None:
            return []
        try:
            payload = SchedulePayload.model_validate(data)
        except PayloadValidationError as e:
            raise CatalogUnavailableError(plan_id, e) from e
        return [assignment.to_domain() for assignment in payload.assignments]

    async def get_meal(self, meal_id: str) -> Optional[CatalogMeal]:
        data = await self._read(f"/meals/{meal_id}", meal_id)
        if data is None:
            return None
        try:
            return MealPayload.model_validate(data).to_domain()
        except PayloadValidationError as e:
            logger.warning(
                "Invalid meal payload", extra={"meal_id": meal_id, "error": str(e)}
            )
            return None
