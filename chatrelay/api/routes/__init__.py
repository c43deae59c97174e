"""
API routes for the chat relay.
"""

from chatrelay.api.routes import chat, conversations, credits, health, templates, usage

__all__ = ["chat", "conversations", "credits", "health", "templates", "usage"]
