"""
Invocation Core - Services.

Collaborators built on the invocation core.
"""

from .completion import ClientFactory, CompletionService, parse_ai_response
from .settings import InvocationSettings

__all__ = [
    "ClientFactory",
    "CompletionService",
    "InvocationSettings",
    "parse_ai_response",
]
