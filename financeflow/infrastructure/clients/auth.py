"""Auth provider HTTP client with in-memory session and state-change listeners"""

import logging
import httpx
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from financeflow.domain.models import AuthSession, Identity
from financeflow.domain.exceptions import AuthenticationError
from financeflow.config import settings
from financeflow.infrastructure.clients.rest import data_service_error, failure
from financeflow.infrastructure.observability.metrics import data_service_latency_histogram

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthListener = Callable[[str, Optional[AuthSession]], None]


@dataclass
class Subscription:
    """Handle returned by on_auth_state_change"""

    callback: AuthListener
    _listeners: List[AuthListener] = field(repr=False)

    def unsubscribe(self) -> None:
        if self.callback in self._listeners:
            self._listeners.remove(self.callback)


def parse_identity(user: Dict[str, Any]) -> Identity:
    return Identity(id=str(user["id"]), email=user.get("email"))


class AuthClient:
    """Client for the hosted auth endpoints under /auth/v1"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        session: AuthSession | None = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = settings.supabase_anon_key if api_key is None else api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport
        self._session = session
        self._listeners: List[AuthListener] = []

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """
        Exchange credentials for a session and notify listeners.

        Raises:
            AuthenticationError: Credentials rejected
            DataServiceError: On timeout, network failure, or other error status
        """
        try:
            response = await self._request(
                "sign_in",
                "POST",
                "/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (400, 401):
                raise AuthenticationError(data_service_error(e.response).message) from e
            raise data_service_error(e.response) from e

        try:
            body = response.json()
            session = AuthSession(
                access_token=body["access_token"],
                refresh_token=body.get("refresh_token", ""),
                expires_at=body.get("expires_at"),
                user=parse_identity(body["user"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise failure("invalid_response", f"Invalid session from auth provider: {e}") from e

        self._set_session(session, SIGNED_IN)
        return session

    async def sign_out(self) -> None:
        """Revoke the current session; the local session is cleared even if revocation fails"""
        session = self._session
        if session is None:
            return
        try:
            await self._request("sign_out", "POST", "/logout", access_token=session.access_token)
        except httpx.HTTPStatusError as e:
            # Already-expired tokens cannot be revoked
            if e.response.status_code not in (401, 403, 404):
                raise data_service_error(e.response) from e
        finally:
            self._set_session(None, SIGNED_OUT)

    async def get_session(self) -> Optional[AuthSession]:
        return self._session

    async def get_user(self) -> Optional[Identity]:
        """
        Resolve the user behind the current access token.

        Returns None without a session or when the provider rejects the token.
        """
        session = self._session
        if session is None:
            return None
        try:
            response = await self._request("get_user", "GET", "/user", access_token=session.access_token)
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (401, 403):
                return None
            raise data_service_error(e.response) from e

        try:
            return parse_identity(response.json())
        except (KeyError, TypeError, ValueError) as e:
            raise failure("invalid_response", f"Invalid user from auth provider: {e}") from e

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        self._listeners.append(callback)
        return Subscription(callback=callback, _listeners=self._listeners)

    def _set_session(self, session: Optional[AuthSession], event: str) -> None:
        self._session = session
        logging.info("Auth state changed", extra={"event": event})
        for listener in list(self._listeners):
            listener(event, session)

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        access_token: str | None = None,
        params: Dict[str, str] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """
        Send one request to the auth endpoints.

        Error statuses are raised as httpx.HTTPStatusError so callers can
        branch on the status; transport failures become DataServiceError.
        """
        headers = {"apikey": self.api_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with data_service_latency_histogram.labels(operation=operation).time():
                    response = await client.request(
                        method,
                        f"{self.base_url}/auth/v1{path}",
                        params=params,
                        json=json,
                        headers=headers,
                    )
            except httpx.TimeoutException as e:
                raise failure("timeout", f"Auth provider timeout after {self.timeout}s") from e
            except httpx.RequestError as e:
                raise failure("network", f"Auth provider unreachable: {e}") from e

        response.raise_for_status()
        return response
