"""PostgREST table client for the hosted data service"""

import httpx
from typing import Any, Dict, List, Mapping, Optional
from financeflow.domain.exceptions import DataServiceError
from financeflow.config import settings
from financeflow.infrastructure.observability.metrics import (
    data_service_failures_counter,
    data_service_latency_histogram,
)

SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def data_service_error(response: httpx.Response) -> DataServiceError:
    """
    Build a DataServiceError from an error response.

    PostgREST answers with {"code", "message", "details", "hint"}; the auth
    endpoints use {"error_code", "msg"} or {"error", "error_description"}.
    Falls back to the HTTP status when the body carries neither.
    """
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    code = body.get("code") or body.get("error_code") or body.get("error") or str(response.status_code)
    message = (
        body.get("message")
        or body.get("msg")
        or body.get("error_description")
        or f"Data service error: {response.status_code}"
    )
    return failure(str(code), message)


def failure(code: str, message: str) -> DataServiceError:
    """Count and return a data service failure"""
    data_service_failures_counter.labels(code=code).inc()
    return DataServiceError(code, message)


def equals(filters: Mapping[str, Any]) -> Dict[str, str]:
    """Translate column equality filters to PostgREST query params"""
    return {column: f"eq.{value}" for column, value in filters.items()}


class RestClient:
    """Client for table operations exposed under /rest/v1"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = settings.supabase_anon_key if api_key is None else api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def insert(self, table: str, row: Dict[str, Any], access_token: str) -> Dict[str, Any]:
        """Insert one row and return it as stored"""
        response = await self._request(
            "insert",
            "POST",
            table,
            access_token,
            json=[row],
            headers={"Prefer": "return=representation", "Accept": SINGLE_OBJECT},
        )
        return self._payload(response)

    async def select(
        self,
        table: str,
        access_token: str,
        filters: Mapping[str, Any],
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Select all columns of rows matching every equality filter.

        Args:
            order: PostgREST ordering, e.g. "date.desc"
        """
        params = {"select": "*", **equals(filters)}
        if order:
            params["order"] = order
        response = await self._request("select", "GET", table, access_token, params=params)
        rows = self._payload(response)
        if not isinstance(rows, list):
            raise failure("invalid_response", f"Expected a list of rows from {table}")
        return rows

    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        access_token: str,
        filters: Mapping[str, Any],
    ) -> None:
        """Update rows matching every equality filter"""
        await self._request(
            "update",
            "PATCH",
            table,
            access_token,
            params=equals(filters),
            json=values,
            headers={"Prefer": "return=minimal"},
        )

    async def delete(self, table: str, access_token: str, filters: Mapping[str, Any]) -> None:
        """Delete rows matching every equality filter"""
        await self._request("delete", "DELETE", table, access_token, params=equals(filters))

    def _headers(self, access_token: str, extra: Mapping[str, str] | None = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token}",
        }
        headers.update(extra or {})
        return headers

    async def _request(
        self,
        operation: str,
        method: str,
        table: str,
        access_token: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """
        Send one request to the table endpoint.

        Raises:
            DataServiceError: On timeout, network failure, or error status
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with data_service_latency_histogram.labels(operation=operation).time():
                    response = await client.request(
                        method,
                        f"{self.base_url}/rest/v1/{table}",
                        params=params,
                        json=json,
                        headers=self._headers(access_token, headers),
                    )
                    response.raise_for_status()
                return response

            except httpx.TimeoutException as e:
                raise failure("timeout", f"Data service timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise data_service_error(e.response) from e
            except httpx.RequestError as e:
                raise failure("network", f"Data service unreachable: {e}") from e

    @staticmethod
    def _payload(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise failure("invalid_response", "Data service returned invalid JSON") from e
