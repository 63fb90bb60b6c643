"""Async HTTP client for the Taskboard REST API."""

import logging

import httpx

from taskclient.errors import ApiError, is_auth_error
from taskclient.session import AuthSession

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = 10.0


class ApiClient:
    def __init__(
        self,
        session: AuthSession,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.session = session
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self._logging_out = False
        session.on_login(self.reset_logout_flag)

    def reset_logout_flag(self) -> None:
        self._logging_out = False

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def request(self, method: str, url: str, context: str, json=None):
        """Send a request and return the decoded JSON body, raising ApiError on failure."""
        headers = {}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"

        try:
            resp = await self._client.request(method, url, json=json, headers=headers)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed while %s: %s", method, url, context, exc)
            raise ApiError("Network Error", url=url, is_network=True, context=context) from exc

        if resp.is_error:
            raise self._error_from_response(resp, context)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body while %s", method, url, context)
            raise ApiError(
                "Invalid response from server",
                status=resp.status_code,
                payload=resp.text,
                url=str(resp.request.url),
                context=context,
            ) from exc

    def _error_from_response(self, resp: httpx.Response, context: str) -> ApiError:
        try:
            payload = resp.json()
        except ValueError:
            payload = resp.text or None
        error = ApiError(
            f"Request failed with status code {resp.status_code}",
            status=resp.status_code,
            payload=payload,
            url=str(resp.request.url),
            context=context,
        )
        if is_auth_error(error):
            # only the first 401 of a session logs out; the rest are marked so callers stay quiet
            if self._logging_out:
                error.suppressed = True
            else:
                self._logging_out = True
                self.session.logout()
        return error

    async def get(self, url: str, context: str = "fetching data"):
        return await self.request("GET", url, context)

    async def post(self, url: str, data=None, context: str = "creating data"):
        return await self.request("POST", url, context, json=data)

    async def put(self, url: str, data=None, context: str = "updating data"):
        return await self.request("PUT", url, context, json=data)

    async def patch(self, url: str, data=None, context: str = "updating data"):
        return await self.request("PATCH", url, context, json=data)

    async def delete(self, url: str, context: str = "deleting data"):
        return await self.request("DELETE", url, context)
