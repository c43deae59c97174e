"""ChatRelay: streaming chat relay for Together AI and OpenRouter with web search."""

__version__ = "0.1.0"
