"""HTTP client for the Fair Work rate-validation endpoint."""
from typing import Any, Optional

import httpx


class FairWorkClient:
    """
    Thin wrapper over httpx with a bounded timeout.
    Raises httpx.HTTPError for transport failures and non-2xx responses; no retries.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Ocp-Apim-Subscription-Key"] = api_key
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    def validate_rate(self, payload: dict[str, Any]) -> dict[str, Any]:
        response = self._client.post("/rates/validate", json=payload)
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "FairWorkClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
