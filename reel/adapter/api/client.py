"""JSON client for the backend's REST API."""

from typing import Any, Optional

import httpx
import logfire

from reel.adapter.error import ApiError


class ApiClient:
    """Thin JSON wrapper over ``httpx.AsyncClient``.

    Sends credentials as a cookie (the dashboard's session) or as a bearer
    token, and turns every failure into ApiError carrying the server's
    ``message`` when the error body has one.
    """

    def __init__(
        self,
        base_url: str,
        auth_token: Optional[str] = None,
        auth_cookie_name: str = "token",
        use_bearer: bool = False,
        connect_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize API client.

        Args:
            base_url: Base URL every endpoint is relative to
            auth_token: Session token, sent as cookie or bearer header
            auth_cookie_name: Cookie carrying the session token
            use_bearer: Send the token as ``Authorization: Bearer`` instead of a cookie
            connect_timeout: TCP connect timeout in seconds
            transport: httpx transport override
        """
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        cookies: dict[str, str] = {}
        if auth_token:
            if use_bearer:
                headers["Authorization"] = f"Bearer {auth_token}"
            else:
                cookies[auth_cookie_name] = auth_token

        self.base_url = base_url.rstrip("/")
        # Overall request time is bounded by the request scheduler
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            cookies=cookies,
            timeout=httpx.Timeout(None, connect=connect_timeout),
            transport=transport,
        )

    async def get(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("GET", endpoint, params=params)

    async def post(self, endpoint: str, data: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("POST", endpoint, json=data)

    async def put(self, endpoint: str, data: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("PUT", endpoint, json=data)

    async def delete(self, endpoint: str) -> Any:
        return await self._request("DELETE", endpoint)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a request and decode the JSON body.

        Returns:
            Decoded body, or None when the response has no body

        Raises:
            ApiError: On transport failure or non-2xx status
        """
        try:
            response = await self._client.request(
                method, endpoint, params=params, json=json
            )
        except httpx.HTTPError as e:
            logfire.error(
                "API request failed",
                method=method,
                endpoint=endpoint,
                error=str(e),
            )
            raise ApiError() from e

        if response.is_error:
            message = self._error_message(response)
            logfire.error(
                "API request returned error status",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
                error=message,
            )
            raise ApiError(message, response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logfire.error(
                "API response is not JSON",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
            )
            raise ApiError(status_code=response.status_code) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"] or None
        return None
