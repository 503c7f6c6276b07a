"""
Completion service: the collaborator that content generation and product
research use to reach the completion API.
"""

import json
import logging
from typing import Any, Callable

from ..cache import make_cache_key
from ..clients import BaseCompletionClient, OpenAICompletionClient
from ..invoker import Invoker
from ..retry import RetryConfig
from .settings import InvocationSettings

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], BaseCompletionClient]


def parse_ai_response(content: str) -> Any:
    """Parse a JSON completion, falling back to {"raw": content}."""
    try:
        return json.loads(content)
    except (TypeError, ValueError):
        return {"raw": content}


class CompletionService:
    """
    Generates completions through an `Invoker`.

    The client comes from an injected factory, called once per attempt, so
    tests can hand in a fake and nothing holds a process-wide client.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        invoker: Invoker,
        service_name: str = "openai",
        retry_config: RetryConfig | None = None,
        cache_ttl: float | None = None,
    ):
        """
        Initialize the service.

        Args:
            client_factory: Returns the client to issue a request with
            invoker: Shared invoker (limiter, cache, orchestrator)
            service_name: Rate limiter key for this API
            retry_config: Retry configuration for completions
            cache_ttl: Memoize identical requests for this many seconds
                (no caching if None)
        """
        self.client_factory = client_factory
        self.invoker = invoker
        self.service_name = service_name
        self.retry_config = retry_config
        self.cache_ttl = cache_ttl

    @classmethod
    def from_settings(
        cls,
        settings: InvocationSettings,
        invoker: Invoker | None = None,
        **kwargs: Any,
    ) -> "CompletionService":
        """Build a service talking to the OpenAI API described by `settings`."""
        invoker = invoker or Invoker()
        service_name = kwargs.pop("service_name", "openai")
        invoker.configure_service(service_name, settings.rate_limit_config())

        def client_factory() -> BaseCompletionClient:
            return OpenAICompletionClient(
                api_key=settings.api_key,
                base_url=settings.base_url,
                default_model=settings.model,
            )

        kwargs.setdefault("retry_config", settings.retry_config())
        return cls(client_factory, invoker, service_name=service_name, **kwargs)

    async def generate(
        self,
        messages: list[dict],
        *,
        model: str | None = None,
        temperature: float = 0.8,
        max_tokens: int = 2500,
        context: str | None = None,
        **options: Any,
    ) -> str:
        """
        Generate a completion.

        Args:
            messages: Message dictionaries
            model: Model override
            temperature: Sampling temperature
            max_tokens: Completion token limit
            context: Label for log messages (what the completion is for)
            **options: Forwarded to `RetryOrchestrator.execute`

        Returns:
            The completion text
        """

        async def operation() -> str:
            client = self.client_factory()
            return await client.complete(
                messages, model=model, temperature=temperature, max_tokens=max_tokens
            )

        cache_key = None
        if self.cache_ttl is not None:
            cache_key = make_cache_key(
                self.service_name, "complete", messages, model, temperature, max_tokens
            )

        if context:
            logger.debug(f"[{self.service_name}] Generating completion for {context}")

        return await self.invoker.call(
            self.service_name,
            operation,
            cache_key=cache_key,
            ttl=self.cache_ttl,
            config=self.retry_config,
            **options,
        )

    async def generate_json(self, messages: list[dict], **kwargs: Any) -> Any:
        """Generate a completion and parse it as JSON."""
        return parse_ai_response(await self.generate(messages, **kwargs))
