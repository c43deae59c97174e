"""
System prompt assembly for upstream chat completions.

The system message is built from an optional caller-supplied template, then
augmented with numbered search results. The model is told not to put URLs in
the answer because the UI renders the sources list on its own.
"""

from typing import Dict, List, Optional, Sequence

from chatrelay.models import ChatMessage, SearchResult

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful and knowledgeable AI assistant. Answer clearly and politely."
)

SEARCH_INSTRUCTIONS = (
    "Use the following search results to inform your answer.\n\n"
    "IMPORTANT: Do not include URLs or references to sources in your answer. "
    "The sources are displayed separately by the system. Reply with the answer body only."
)


def format_search_results(search_results: Sequence[SearchResult]) -> str:
    """Render results as ``[n] title`` followed by the snippet, one block per result."""
    return "\n\n".join(
        f"[{i}] {result.title}\n{result.content}"
        for i, result in enumerate(search_results, start=1)
    )


def build_system_message(
    template: Optional[str] = None,
    search_results: Optional[Sequence[SearchResult]] = None,
) -> str:
    """Build the system message sent ahead of the conversation history.

    Args:
        template: Caller-supplied system prompt. DEFAULT_SYSTEM_PROMPT if empty.
        search_results: Optional search hits to ground the answer in.

    Returns:
        The system message text
    """
    base = template.strip() if template and template.strip() else DEFAULT_SYSTEM_PROMPT
    if not search_results:
        return base

    return (
        f"{base}\n\n{SEARCH_INSTRUCTIONS}\n\n"
        f"Search results:\n{format_search_results(search_results)}"
    )


def with_timestamp(prompt: Optional[str], date_time: Optional[str]) -> Optional[str]:
    """Prefix the client's wall-clock time to a system prompt template."""
    if not date_time:
        return prompt
    stamp = f"Current date and time: {date_time}"
    return f"{stamp}\n\n{prompt}" if prompt else stamp


def build_messages(
    history: Sequence[ChatMessage],
    system_prompt: Optional[str] = None,
    search_results: Optional[Sequence[SearchResult]] = None,
) -> List[Dict[str, str]]:
    """System message first, then the conversation in order."""
    messages = [
        {
            "role": "system",
            "content": build_system_message(system_prompt, search_results),
        }
    ]
    messages.extend({"role": m.role, "content": m.content} for m in history)
    return messages
