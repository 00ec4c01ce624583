# ent_prep/client/api.py
import logging
from typing import Any, Optional

import httpx

from .config import API_BASE_URL, API_TIMEOUT
from .session import Session

logger = logging.getLogger(__name__)

PUBLIC_ENDPOINTS = ("/auth/login", "/auth/register")


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiTimeoutError(ApiError):
    pass


class ApiClient:
    """Thin JSON client for the ENT Prep backend."""

    def __init__(
        self,
        session: Session,
        base_url: str = API_BASE_URL,
        timeout: float = API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def call(self, endpoint: str, method: str = "GET", json: Any = None, params: Optional[dict] = None) -> Any:
        if endpoint != "/auth/current-user":
            logger.info(f"API {method} to {endpoint}")

        headers = {}
        if not endpoint.startswith(PUBLIC_ENDPOINTS):
            token = await self.session.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self.client.request(method, endpoint, json=json, params=params, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"Request to {endpoint} timed out after {self.timeout}s")
            raise ApiTimeoutError(
                f"Request timed out after {self.timeout:g} seconds. "
                "The server might be overloaded or temporarily unavailable."
            )
        except httpx.HTTPError as e:
            logger.error(f"API error with {endpoint}: {e}")
            raise ApiError(str(e) or f"Request to {endpoint} failed")

        if response.is_error:
            try:
                message = response.json().get("message")
            except (ValueError, AttributeError):
                message = None
            logger.error(f"API Error ({response.status_code}): {endpoint}")
            raise ApiError(message or f"API Error: {response.status_code}", response.status_code)

        return response.json()
