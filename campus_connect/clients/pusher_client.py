from typing import Any, Dict, Optional

import httpx
import pusher
from pusher.http import process_response

from campus_connect.clients.base_push_client import BasePushClient


class HttpxBackend:
    """pusher transport backend that sends signed requests through httpx."""

    def __init__(self, client: Any, http_client: httpx.AsyncClient):
        self.client = client
        self.http_client = http_client

    async def send_request(self, request: Any) -> Dict[str, Any]:
        response = await self.http_client.request(
            request.method,
            f"{request.base_url}{request.path}",
            params=request.query_params,
            content=request.body,
            headers=request.headers,
        )
        result: Dict[str, Any] = process_response(response.status_code, response.text)
        return result


class PusherClient(BasePushClient):
    """Client for a Pusher-compatible HTTP events API."""

    def __init__(
        self,
        base_url: str,
        app_id: str,
        key: str,
        secret: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        url = httpx.URL(base_url)
        self.base_url = base_url.rstrip("/")
        self.app_id = app_id
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._pusher = pusher.Pusher(
            app_id=app_id,
            key=key,
            secret=secret,
            ssl=url.scheme == "https",
            host=url.host,
            port=url.port,
            timeout=int(timeout),
            backend=HttpxBackend,
            http_client=self._client,
        )

    @property
    def events_path(self) -> str:
        return f"/apps/{self.app_id}/events"

    async def trigger(self, topic: str, event: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Publish an event on a channel."""
        result: Dict[str, Any] = await self._pusher.trigger(topic, event, data)
        return result

    async def aclose(self) -> None:
        await self._client.aclose()
