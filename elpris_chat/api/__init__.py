"""HTTP surface: the chat endpoint consumed by the form UI."""

from elpris_chat.api.app import create_app

__all__ = ["create_app"]
