"""
Analysis API client for submitting commit diffs.

Handles:
- Authentication
- Commit submission
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from atm_hook import __version__
from atm_hook.config import HookConfig
from atm_hook.exceptions import AnalysisAPIError
from atm_hook.models import CommitDiff

logger = logging.getLogger(__name__)


def _json_object(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body; anything else yields an empty dict."""
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        logger.debug("Response body is not JSON: %r", response.text[:200])
        return {}
    return data if isinstance(data, dict) else {}


@dataclass
class SubmitResult:
    """Result of a commit submission."""

    success: bool
    analysis_id: str | None = None
    error: str | None = None
    findings: list[dict[str, Any]] | None = None


class AnalysisClient:
    """
    Client for the threat modeler analysis API.

    Usage:
        with AnalysisClient(config) as client:
            result = client.submit(commit_diff)
    """

    def __init__(self, config: HookConfig):
        self.config = config
        self._validate_config()

        self._client = httpx.Client(
            base_url=config.api_url,
            headers=self._build_headers(),
            timeout=config.timeout,
        )

    def _validate_config(self) -> None:
        if not self.config.api_url:
            raise ValueError(
                "Analysis API URL is required. "
                "Set ATM_HOOK_API_URL environment variable or configure in .atm-hook.toml"
            )

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"atm-git-hook/{__version__}",
        }
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def submit(self, diff: CommitDiff) -> SubmitResult:
        """
        Submit a commit diff for analysis.

        Args:
            diff: CommitDiff to submit

        Returns:
            SubmitResult with the analysis ID or an error
        """
        payload = diff.to_dict()
        if self.config.project_id:
            payload["project_id"] = self.config.project_id

        try:
            response = self._client.post("/commits", json=payload)

            if response.status_code == 401:
                raise AnalysisAPIError(401, "Invalid API key")

            if response.status_code == 403:
                raise AnalysisAPIError(403, "Access denied to project")

            if response.status_code >= 400:
                error_data = _json_object(response)
                raise AnalysisAPIError(
                    response.status_code,
                    error_data.get("error", "Unknown error"),
                    error_data,
                )

            data = _json_object(response)

            return SubmitResult(
                success=True,
                analysis_id=data.get("id") or data.get("analysis_id"),
                findings=data.get("findings"),
            )

        except httpx.RequestError as e:
            logger.error(f"Request failed: {e}")
            return SubmitResult(success=False, error=f"Request failed: {e}")
        except AnalysisAPIError as e:
            logger.error(f"API error: {e}")
            return SubmitResult(success=False, error=str(e))

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> AnalysisClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
