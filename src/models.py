#!/usr/bin/env python3
"""
Data models for Chat Share Parser
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum

class MessageRole(Enum):
    """Message role enumeration"""
    USER = "user"
    ASSISTANT = "assistant"

    def opposite(self) -> "MessageRole":
        return MessageRole.ASSISTANT if self is MessageRole.USER else MessageRole.USER

class Platform(Enum):
    """Supported chat platforms"""
    CHATGPT = "chatgpt"
    CLAUDE = "claude"
    GEMINI = "gemini"

@dataclass(frozen=True)
class ParsedMessage:
    """Represents a single extracted message"""
    id: str
    role: MessageRole
    content: str
    html: str = ""

    def __post_init__(self):
        if not isinstance(self.id, str):
            object.__setattr__(self, 'id', str(self.id))
        if isinstance(self.role, str):
            object.__setattr__(self, 'role', MessageRole(self.role.lower()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'role': self.role.value,
            'content': self.content,
            'html': self.html,
        }

@dataclass
class ParseResult:
    """Represents a successfully parsed shared conversation"""
    title: str
    source_url: str
    messages: List[ParsedMessage]
    platform: Platform
    method: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.platform, str):
            self.platform = Platform(self.platform.lower())

    def get_user_messages(self) -> List[ParsedMessage]:
        """Get all user messages"""
        return [msg for msg in self.messages if msg.role == MessageRole.USER]

    def get_assistant_messages(self) -> List[ParsedMessage]:
        """Get all assistant messages"""
        return [msg for msg in self.messages if msg.role == MessageRole.ASSISTANT]

    def get_message_count(self) -> int:
        """Get total message count"""
        return len(self.messages)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the shape handed to share-creation consumers"""
        return {
            'title': self.title,
            'sourceUrl': self.source_url,
            'messages': [msg.to_dict() for msg in self.messages],
            'platform': self.platform.value,
        }
