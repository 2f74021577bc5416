"""
HTTP client the MCP tools use to reach the tracker REST API.

The client holds no state between calls. Every tool invocation opens a fresh
client, so approval flags are always read from the API.
"""

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from app.mcp.config import mcp_settings


class TrackerAPIError(Exception):
    """Raised when the tracker API answers with a non-success status or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class TrackerAPIClient:
    """Async client for the problem/research/experiment resources."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or mcp_settings.API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else mcp_settings.API_TIMEOUT
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        """Make HTTP request with error handling"""
        if not self.client:
            raise TrackerAPIError("API client not initialized. Use async context manager.")

        url = endpoint if endpoint.startswith("/") else f"/{endpoint}"

        try:
            logger.debug(f"API request {method} {url}")
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"HTTP error {status_code} for {method} {url}")
            try:
                error_data = e.response.json()
            except ValueError:
                error_data = None
            if not isinstance(error_data, dict):
                error_data = {"detail": e.response.text}

            raise TrackerAPIError(
                f"HTTP {status_code}: {error_data.get('detail', 'Unknown error')}",
                status_code=status_code,
                details=error_data,
            ) from e

        except httpx.RequestError as e:
            logger.error(f"Request error for {method} {url}: {e}")
            raise TrackerAPIError(f"Request failed: {str(e)}") from e

    # ========== Problems ==========

    async def list_problems_to_investigate(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/problems/investigate")

    async def get_problem(self, problem_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/problems/{problem_id}")

    # ========== Research ==========

    async def add_research(self, problem_id: int, content: str) -> Dict[str, Any]:
        return await self._request("POST", f"/problems/{problem_id}/research", json={"content": content})

    async def list_research(self, problem_id: int) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/problems/{problem_id}/research")

    async def get_approved_research(self, problem_id: int) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/problems/{problem_id}/research/approved")

    # ========== Experiments ==========

    async def add_experiment(self, problem_id: int, proposal: str) -> Dict[str, Any]:
        return await self._request("POST", f"/problems/{problem_id}/experiments", json={"proposal": proposal})

    async def get_approved_experiments(self, problem_id: int) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/problems/{problem_id}/experiments/approved")

    async def update_experiment(self, problem_id: int, experiment_id: int, **fields) -> Dict[str, Any]:
        return await self._request(
            "PATCH", f"/problems/{problem_id}/experiments/{experiment_id}", json=fields
        )

    async def start_experiment(self, problem_id: int, experiment_id: int) -> Dict[str, Any]:
        return await self.update_experiment(problem_id, experiment_id, status="IN PROGRESS")

    async def complete_experiment(
        self, problem_id: int, experiment_id: int, url: Optional[str] = None
    ) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"status": "FINISHED"}
        if url is not None:
            fields["url"] = url
        return await self.update_experiment(problem_id, experiment_id, **fields)


def get_api_client() -> TrackerAPIClient:
    """Create a new client from the current settings."""
    return TrackerAPIClient()
