#!/usr/bin/env python3
"""
Error taxonomy for Chat Share Parser
Every failure that leaves a parser is one of these kinds.
"""

from datetime import datetime
from typing import List, Optional

class ParseError(Exception):
    """Base exception for all parsing and retrieval errors"""

    error_type = "general"

    def __init__(self, message: str, platform: Optional[str] = None):
        super().__init__(message)
        self.platform = platform
        self.timestamp = datetime.now()

class InvalidUrlError(ParseError):
    """A parser was handed a URL that does not match its share patterns"""

    error_type = "invalid_url"

    def __init__(self, message: str = "Invalid share URL", platform: Optional[str] = None):
        super().__init__(message, platform)

class UnsupportedPlatformError(ParseError):
    """No registered parser matches the URL"""

    error_type = "unsupported_platform"

    def __init__(self, url: str):
        super().__init__(f"No parser available for URL: {url}")
        self.url = url

class ConversationNotFoundError(ParseError):
    """The origin site answered with a not-found status"""

    error_type = "not_found"

    def __init__(self, message: str = "Conversation not found", platform: Optional[str] = None):
        super().__init__(message, platform)

class NoMessagesFoundError(ParseError):
    """The page was retrieved but no message survived extraction"""

    error_type = "no_messages"

    def __init__(self, message: str = "No messages found in the conversation", platform: Optional[str] = None):
        super().__init__(message, platform)

class NetworkError(ParseError):
    """Transport-level failure while retrieving the share page"""

    error_type = "network"

    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    BAD_STATUS = "bad_status"

    def __init__(self, message: str, kind: str = UNREACHABLE, platform: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(message, platform)
        self.kind = kind
        self.status_code = status_code

_SUGGESTIONS = {
    "invalid_url": [
        "Check that you copied the full share link",
    ],
    "unsupported_platform": [
        "Only public share links are supported",
    ],
    "not_found": [
        "The shared link may be invalid or expired",
        "The conversation may have been deleted",
    ],
    "no_messages": [
        "The page structure may have changed",
        "Check that the link opens in your browser",
    ],
    "network": [
        "Check your internet connection",
        "The service may be temporarily unavailable",
        "Try again later",
    ],
}

def user_message(error: ParseError, supported_patterns: Optional[List[str]] = None) -> str:
    """
    Build a user-facing explanation for a parse error

    Args:
        error: The error raised by a parser or the registry
        supported_patterns: Share URL formats to list for URL-related errors

    Returns:
        Multi-line message with suggestions
    """
    lines = [str(error)]

    if error.error_type in ("invalid_url", "unsupported_platform") and supported_patterns:
        lines.append(f"Supported URL formats: {', '.join(supported_patterns)}")

    if isinstance(error, NetworkError) and error.kind == NetworkError.TIMEOUT:
        lines.append("The request timed out before the page was retrieved.")

    suggestions = _SUGGESTIONS.get(error.error_type, [])
    if suggestions:
        lines.append("")
        lines.append("Possible solutions:")
        for i, suggestion in enumerate(suggestions, 1):
            lines.append(f"{i}. {suggestion}")

    return "\n".join(lines)
