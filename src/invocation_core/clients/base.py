"""
Base completion client interface.

Clients perform exactly one HTTP request per call and raise typed errors;
retries and rate limiting belong to the invocation core.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Message roles in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single message in a conversation."""

    role: Role
    content: str

    def to_dict(self) -> dict:
        """Convert to dictionary format for API requests."""
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def system(cls, content: str) -> "Message":
        """Create a system message."""
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        """Create a user message."""
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        """Create an assistant message."""
        return cls(role=Role.ASSISTANT, content=content)


def build_messages(
    prompt: str,
    system: str | None = None,
    context: list[dict] | None = None,
) -> list[dict]:
    """
    Build message list from prompt, system message, and context.

    Args:
        prompt: The user prompt
        system: Optional system message
        context: Optional conversation history

    Returns:
        List of message dictionaries
    """
    messages = []

    if system:
        messages.append(Message.system(system).to_dict())

    if context:
        messages.extend(context)

    messages.append(Message.user(prompt).to_dict())

    return messages


class BaseCompletionClient(ABC):
    """
    Abstract base class for completion clients.

    All provider adapters must implement this interface.
    """

    def __init__(self, default_model: str | None = None, timeout: float = 120.0):
        """
        Initialize the client.

        Args:
            default_model: Default model to use if not specified per-request
            timeout: Request timeout in seconds
        """
        self.default_model = default_model
        self.timeout = timeout

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name for logging."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[dict],
        model: str | None = None,
        temperature: float = 0.8,
        max_tokens: int = 2500,
    ) -> str:
        """
        Request a chat completion.

        Args:
            messages: Message dictionaries (see `Message.to_dict`)
            model: Model to use (defaults to client's default_model)
            temperature: Sampling temperature
            max_tokens: Completion token limit

        Returns:
            The generated response text
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the service is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...
