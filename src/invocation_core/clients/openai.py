"""
OpenAI-compatible chat completion client.
"""

import logging

import httpx

from .base import BaseCompletionClient
from ..exceptions import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AuthenticationError,
    InvalidRequestError,
    NotFoundError,
    RateLimitError,
    ServerError,
)

logger = logging.getLogger(__name__)

QUOTA_CODES = ("insufficient_quota", "rate_limit_exceeded")


class OpenAICompletionClient(BaseCompletionClient):
    """
    Client for the OpenAI chat completions API (or any compatible endpoint).

    One request per call; every failure surfaces as a typed exception that
    the error classifier understands.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        default_model: str = "gpt-4o-mini",
        timeout: float = 120.0,
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: API key sent as a bearer token
            base_url: API base URL
            default_model: Default model to use
            timeout: Request timeout in seconds
        """
        super().__init__(default_model, timeout)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    @property
    def provider_name(self) -> str:
        return "OpenAI"

    def _get_headers(self) -> dict:
        """Get headers for API requests."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _error_body(self, response: httpx.Response) -> dict:
        try:
            data = response.json()
        except ValueError:
            return {}
        error = data.get("error") if isinstance(data, dict) else None
        return error if isinstance(error, dict) else {}

    def _handle_error(self, response: httpx.Response) -> None:
        """Convert HTTP error statuses to domain exceptions."""
        status = response.status_code
        body = self._error_body(response)
        message = body.get("message") or response.text
        code = body.get("code") or body.get("type")
        kwargs = {"provider": self.provider_name, "status_code": status, "body": response.text}

        if status == 429 or code in QUOTA_CODES:
            if code == "insufficient_quota":
                logger.error(
                    f"[{self.provider_name}] API quota exceeded, check billing and usage limits"
                )
            raise RateLimitError(f"Rate limit exceeded: {message}", code=code, **kwargs)
        if status in (401, 403):
            raise AuthenticationError("Invalid API key", **kwargs)
        if status == 404:
            raise NotFoundError("Model not found", **kwargs)
        if status in (400, 422):
            raise InvalidRequestError(f"Invalid request: {message}", **kwargs)
        if status >= 500:
            raise ServerError(f"Server error: {message}", **kwargs)
        raise APIStatusError(f"Unexpected status: {message}", **kwargs)

    async def complete(
        self,
        messages: list[dict],
        model: str | None = None,
        temperature: float = 0.8,
        max_tokens: int = 2500,
    ) -> str:
        """Request a chat completion (single attempt)."""
        model = model or self.default_model

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=self._get_headers(),
                    json={
                        "model": model,
                        "messages": messages,
                        "temperature": temperature,
                        "max_tokens": max_tokens,
                    },
                )
        except httpx.TimeoutException as e:
            raise APITimeoutError(
                f"Request timed out after {self.timeout}s",
                provider=self.provider_name,
            ) from e
        except httpx.TransportError as e:
            raise APIConnectionError(
                f"Failed to connect to {self.base_url}",
                provider=self.provider_name,
            ) from e

        if response.status_code != 200:
            self._handle_error(response)

        data = response.json()
        return data["choices"][0]["message"]["content"]

    async def health_check(self) -> bool:
        """Check if the API is accessible."""
        if not self.api_key:
            logger.warning(f"[{self.provider_name}] API key not configured")
            return False
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(
                    f"{self.base_url}/models",
                    headers=self._get_headers(),
                )
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.debug(f"[{self.provider_name}] Health check failed: {e}")
            return False
