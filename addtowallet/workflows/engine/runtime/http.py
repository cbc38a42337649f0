import httpx
import logging
from typing import Any, Dict, Optional

from addtowallet.config import settings
from addtowallet.workflows.engine.errors import NodeApiError

logger = logging.getLogger(__name__)


class HTTPRuntime:
    """Handles network requests for the workflow engine."""

    @staticmethod
    async def request(
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> Dict[str, Any]:
        """Performs an asynchronous HTTP request."""
        method = method.upper()
        try:
            async with httpx.AsyncClient(
                transport=transport,
                timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT,
            ) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    json=body if method != "GET" else None,
                    params=params,
                )
        except httpx.TimeoutException as e:
            logger.error(f"HTTP runtime request to {url} timed out: {e}")
            raise NodeApiError(f"Request to {url} timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP runtime request failed: {e}")
            raise NodeApiError(f"Network request failed: {str(e)}") from e

        try:
            data = response.json()
        except ValueError:
            data = response.text

        return {
            "status": response.status_code,
            "data": data,
            "headers": dict(response.headers),
        }

    @classmethod
    async def request_json(cls, method: str, url: str, **kwargs) -> Any:
        """
        Performs a request and returns the parsed JSON body.

        Raises:
            NodeApiError: on HTTP status >= 400 or a non-JSON response
        """
        result = await cls.request(method, url, **kwargs)
        status = result["status"]
        data = result["data"]

        if status >= 400:
            detail = (data.get("msg") or data.get("message")) if isinstance(data, dict) else data
            message = f"Request failed with status code {status}"
            if detail:
                message = f"{message}: {detail}"
            raise NodeApiError(message, status_code=status, response_body=data)

        if isinstance(data, str):
            raise NodeApiError(
                f"Expected a JSON response from {url}", status_code=status, response_body=data
            )

        return data
