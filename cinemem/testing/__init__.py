"""Test doubles for cinemem's external services."""

from .fakes import FakeOpenAI, FakeTrakt, api_status_error, chat_response, tool_call

__all__ = ["FakeOpenAI", "FakeTrakt", "api_status_error", "chat_response", "tool_call"]
