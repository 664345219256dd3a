"""
Remote call gateway for Supabase.

- ManagementGateway: Management API (api.supabase.com) с management key
- DataPlaneSession: Auth admin + PostgREST RPC проекта с service role key
- VendorSession: обе сессии одного запуска, закрываются вместе

Одна попытка на вызов, без retry и без кэширования. Любой non-2xx ответ или
транспортная ошибка возвращается как FetchFailure, а не исключение.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .models import Credentials, FetchFailure, GatewayResult, Ok
from ..config import ComplianceConfig

logger = logging.getLogger(__name__)


async def send_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    headers: Dict[str, str],
    json: Optional[Any] = None,
) -> GatewayResult:
    """
    Выполнить один HTTP запрос.

    Returns:
        Ok(parsed JSON) или FetchFailure
    """
    logger.debug(f"{method} {url}")

    try:
        response = await client.request(method, url, headers=headers, json=json)
    except httpx.HTTPError as e:
        logger.warning(f"{method} {url} failed: {type(e).__name__}: {e}")
        return FetchFailure(status_code=None, reason=f"{type(e).__name__}: {e}")

    if not response.is_success:
        logger.warning(f"{method} {url} returned {response.status_code}")
        return FetchFailure(
            status_code=response.status_code,
            body=response.text,
            reason=response.reason_phrase,
        )

    if not response.content:
        return Ok(None)

    try:
        return Ok(response.json())
    except ValueError:
        return FetchFailure(
            status_code=response.status_code,
            body=response.text,
            reason="Invalid JSON in response body",
        )


class ManagementGateway:
    """
    Вызовы Supabase Management API.

    Использование:
        gateway = ManagementGateway(credentials)
        result = await gateway.call(f"projects/{ref}/subscription")
        if isinstance(result, FetchFailure):
            ...
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: str = "https://api.supabase.com/v1",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.credentials.management_key}",
            "Content-Type": "application/json",
        }

    async def call(
        self,
        endpoint_path: str,
        method: str = "GET",
        json: Optional[Any] = None,
    ) -> GatewayResult:
        """Вызвать endpoint Management API (путь относительно /v1)."""
        url = f"{self.base_url}/{endpoint_path.lstrip('/')}"
        return await send_request(self._client, method, url, self._headers(), json=json)

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()


class DataPlaneSession:
    """Сессия data plane проекта (Auth admin API и PostgREST)."""

    def __init__(
        self,
        credentials: Credentials,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.credentials = credentials
        self.base_url = credentials.endpoint_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.credentials.data_plane_key,
            "Authorization": f"Bearer {self.credentials.data_plane_key}",
            "Content-Type": "application/json",
        }

    async def list_users(self) -> GatewayResult:
        """
        Получить пользователей вместе с их MFA факторами.

        Только первая страница: пагинация не обрабатывается.
        """
        url = f"{self.base_url}/auth/v1/admin/users"
        return await send_request(self._client, "GET", url, self._headers())

    async def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> GatewayResult:
        """Вызвать server-side процедуру через PostgREST."""
        url = f"{self.base_url}/rest/v1/rpc/{name}"
        return await send_request(self._client, "POST", url, self._headers(), json=params or {})

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()


class VendorSession:
    """Сессии одного запуска. Создаётся заново на каждый запуск."""

    def __init__(self, data_plane: DataPlaneSession, management: ManagementGateway):
        self.data_plane = data_plane
        self.management = management

    async def aclose(self):
        await self.data_plane.aclose()
        await self.management.aclose()


def open_vendor_session(credentials: Credentials, config: ComplianceConfig) -> VendorSession:
    """Фабрика сессий по умолчанию."""
    return VendorSession(
        data_plane=DataPlaneSession(credentials, timeout=config.http_timeout_seconds),
        management=ManagementGateway(
            credentials,
            base_url=config.management_api_base,
            timeout=config.http_timeout_seconds,
        ),
    )
