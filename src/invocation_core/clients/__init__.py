"""
Invocation Core - Completion Clients.

Thin HTTP adapters for completion APIs; resilience lives in the core.
"""

from .base import BaseCompletionClient, Message, Role, build_messages
from .openai import OpenAICompletionClient

__all__ = [
    "BaseCompletionClient",
    "Message",
    "Role",
    "build_messages",
    "OpenAICompletionClient",
]
