"""
Type definitions for the chat app.
"""
from enum import StrEnum


class ChatMessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
