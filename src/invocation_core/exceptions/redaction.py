"""
Masking of credentials in text that leaves the process (logs, serialized errors).

API error bodies are echoed into exception messages, and some of them quote
the key that was sent.
"""

import re

REDACTED = "***REDACTED***"

_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"([a-zA-Z0-9_-]+_)?[Aa]pi[_-]?[Kk]ey[:\s=]+([^\s,;]+)"), rf"\1api_key={REDACTED}"),
    (re.compile(r"([a-zA-Z0-9_-]+_)?[Tt]oken[:\s=]+([^\s,;]+)"), rf"\1token={REDACTED}"),
    (re.compile(r"([a-zA-Z0-9_-]+_)?[Pp]assword[:\s=]+([^\s,;]+)"), rf"\1password={REDACTED}"),
    (re.compile(r"([a-zA-Z0-9_-]+_)?[Ss]ecret[:\s=]+([^\s,;]+)"), rf"\1secret={REDACTED}"),
    # OpenAI keys, including the sk-proj- / sk-svcacct- forms
    (re.compile(r"sk-[A-Za-z0-9_-]{20,}"), f"sk-{REDACTED}"),
)


def redact_sensitive(text: str) -> str:
    """
    Replace API keys, tokens, passwords and secrets in `text`.

    Args:
        text: Text that may contain credentials; non-strings are returned as is

    Returns:
        The text with every credential value replaced by ***REDACTED***
    """
    if not isinstance(text, str):
        return text
    for pattern, replacement in _PATTERNS:
        text = pattern.sub(replacement, text)
    return text
