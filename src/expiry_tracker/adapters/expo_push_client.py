"""Expo push service client."""

from dataclasses import dataclass

import httpx

from expiry_tracker.services.delivery import PushClient


@dataclass
class HttpxExpoPushClient(PushClient):
    """HTTPX-backed client for the Expo push API."""

    push_url: str
    http_client: httpx.AsyncClient
    access_token: str | None = None

    @classmethod
    def create(
        cls, push_url: str, access_token: str | None = None
    ) -> "HttpxExpoPushClient":
        """Create a push client with a managed httpx session."""
        return cls(
            push_url=push_url,
            http_client=httpx.AsyncClient(),
            access_token=access_token,
        )

    async def send(self, messages: list[dict[str, object]]) -> list[dict[str, object]]:
        """Send push messages and return the delivery tickets."""
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        response = await self.http_client.post(
            self.push_url,
            json=messages,
            headers=headers,
            timeout=15,
        )
        response.raise_for_status()
        payload = response.json()
        tickets = payload.get("data", []) if isinstance(payload, dict) else []
        return tickets if isinstance(tickets, list) else [tickets]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
