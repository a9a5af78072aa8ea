"""n8n public REST API client using httpx."""

from typing import Any

import httpx

from flowctl.config import InstanceConfig
from flowctl.core.exceptions import N8nError, AuthenticationError
from flowctl.core.logging import StructuredLogger
from flowctl.core.utils import mask_secret

logger = StructuredLogger(__name__)

API_KEY_HEADER = "X-N8N-API-KEY"
WORKFLOWS_PATH = "/api/v1/workflows"


class N8nClient:
    """Client for the n8n workflows API.

    Every call is a single blocking request. Errors are raised, never
    retried; callers decide whether a failure aborts a batch.
    """

    def __init__(
        self,
        config: InstanceConfig,
        http_client: httpx.Client | None = None,
    ):
        self._config = config
        self._client = http_client
        if http_client is not None:
            http_client.headers.update(self.auth_headers())

    @property
    def base_url(self) -> str | None:
        return self._config.get_base_url()

    def masked_api_key(self) -> str:
        """Get the API key as safe-to-print text."""
        return mask_secret(self._config.get_api_key())

    def auth_headers(self) -> dict[str, str]:
        api_key = self._config.get_api_key()
        if not api_key:
            raise AuthenticationError("n8n API key not configured")
        return {
            API_KEY_HEADER: api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            url = self._config.get_base_url()
            if not url:
                raise N8nError("n8n base URL not configured")

            self._client = httpx.Client(
                base_url=url,
                headers=self.auth_headers(),
                timeout=httpx.Timeout(
                    self._config.timeout,
                    connect=self._config.connect_timeout,
                ),
            )

            logger.debug("Created n8n client", url=url)

        return self._client

    def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> Any:
        """Make an API request.

        Args:
            method: HTTP method
            path: API path
            **kwargs: Additional request arguments

        Returns:
            Response JSON data

        Raises:
            AuthenticationError: On HTTP 401/403
            N8nError: On any other non-2xx status or connection failure
        """
        logger.debug("n8n request", method=method, path=path)
        try:
            response = self.client.request(method, path, **kwargs)
            response.raise_for_status()

            if response.content:
                return response.json()
            return None

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            message = _error_message(e.response)

            if status_code in (401, 403):
                raise AuthenticationError(message, status_code=status_code)
            raise N8nError(message, status_code=status_code)

        except httpx.RequestError as e:
            raise N8nError(f"Request failed: {e}")

        except ValueError as e:
            raise N8nError(f"Invalid JSON in response: {e}")

    def get(self, path: str, **kwargs: Any) -> Any:
        """Make a GET request."""
        return self._request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        """Make a POST request."""
        return self._request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        """Make a PUT request."""
        return self._request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Any:
        """Make a PATCH request."""
        return self._request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        """Make a DELETE request."""
        return self._request("DELETE", path, **kwargs)

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "N8nClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # Workflow operations
    def list_workflows(self) -> list[dict[str, Any]]:
        """List all workflows (summary records with at least id and name)."""
        response = self.get(WORKFLOWS_PATH)
        if not isinstance(response, dict):
            raise N8nError("Unexpected list response: expected an object with 'data'")
        return response.get("data") or []

    def get_workflow(self, workflow_id: str) -> dict[str, Any]:
        """Get a full workflow document by ID."""
        return self.get(f"{WORKFLOWS_PATH}/{workflow_id}")

    def create_workflow(self, document: dict[str, Any]) -> dict[str, Any]:
        """Create a workflow; the response carries the assigned id."""
        return self.post(WORKFLOWS_PATH, json=document)

    def update_workflow(self, workflow_id: str, document: dict[str, Any]) -> dict[str, Any]:
        """Replace an existing workflow."""
        return self.put(f"{WORKFLOWS_PATH}/{workflow_id}", json=document)

    def activate_workflow(self, workflow_id: str) -> dict[str, Any]:
        """Request activation of a workflow."""
        return self.patch(f"{WORKFLOWS_PATH}/{workflow_id}", json={"active": True})

    def delete_workflow(self, workflow_id: str) -> Any:
        """Delete a workflow by ID."""
        return self.delete(f"{WORKFLOWS_PATH}/{workflow_id}")


def _error_message(response: httpx.Response) -> str:
    """Extract a readable error message from an error response."""
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        for key in ("message", "error", "detail"):
            if data.get(key):
                return f"HTTP {response.status_code}: {data[key]}"

    text = response.text.strip()
    return f"HTTP {response.status_code}: {text}" if text else f"HTTP {response.status_code}"
