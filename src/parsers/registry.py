#!/usr/bin/env python3
"""
Parser Registry for Chat Share Parser
Routes share URLs to the platform parser that understands them.
"""

import logging
import threading
from typing import Optional, List, Dict, Any, Tuple, Union

from models import ParseResult, Platform
from parsers.base_parser import BaseParser
from parsers.chatgpt_parser import ChatGPTParser
from parsers.claude_parser import ClaudeParser
from parsers.gemini_parser import GeminiParser
from parsers.errors import UnsupportedPlatformError

logger = logging.getLogger(__name__)

class ParserRegistry:
    """Registry of platform parsers, keyed by platform"""

    PARSER_CLASSES = [ChatGPTParser, ClaudeParser, GeminiParser]

    def __init__(self, parsers: Optional[List[BaseParser]] = None,
                 config: Optional[Dict[str, Any]] = None):
        """
        Args:
            parsers: Parsers to register instead of the built-in ones
            config: Configuration shared by the built-in parsers
        """
        self.config = config or {}
        self._parsers: Dict[str, BaseParser] = {}

        if parsers is None:
            parsers = [parser_class(self.config) for parser_class in self.PARSER_CLASSES]

        for parser in parsers:
            self.register(parser)

    def register(self, parser: BaseParser):
        """Register a parser; a second parser for the same platform is ignored"""
        key = parser.platform.value
        if key in self._parsers:
            logger.debug(f"Parser for {key} already registered, ignoring")
            return
        self._parsers[key] = parser
        logger.debug(f"Registered {key} parser")

    def unregister(self, platform: Union[Platform, str]):
        key = platform.value if isinstance(platform, Platform) else str(platform).lower()
        if self._parsers.pop(key, None) is not None:
            logger.debug(f"Unregistered {key} parser")

    def get_parser(self, url: str) -> Optional[BaseParser]:
        """
        Find the parser for a share URL

        Args:
            url: Share URL

        Returns:
            First registered parser that accepts the URL, or None
        """
        for parser in self.get_parsers():
            if parser.can_parse(url):
                return parser
        return None

    def can_parse(self, url: str) -> bool:
        return self.get_parser(url) is not None

    def parse(self, url: str) -> ParseResult:
        """
        Parse a share URL with the matching parser

        Raises:
            UnsupportedPlatformError: If no parser accepts the URL
            ParseError: Any error raised by the matched parser
        """
        parser = self.get_parser(url)
        if parser is None:
            raise UnsupportedPlatformError(url)

        logger.debug(f"Dispatching to {parser.platform.value} parser")
        return parser.parse(url)

    def get_parsers(self) -> Tuple[BaseParser, ...]:
        return tuple(self._parsers.values())

    def get_supported_patterns(self) -> List[str]:
        """Get all share URL formats across registered parsers"""
        patterns = []
        for parser in self.get_parsers():
            patterns.extend(parser.get_supported_patterns())
        return patterns

    def get_supported_platforms(self) -> List[str]:
        return [parser.platform.value for parser in self.get_parsers()]

_default_registry: Optional[ParserRegistry] = None
_default_registry_lock = threading.Lock()

def get_default_registry() -> ParserRegistry:
    """Get the process-wide registry, creating it on first use"""
    global _default_registry
    if _default_registry is None:
        with _default_registry_lock:
            if _default_registry is None:
                _default_registry = ParserRegistry()
    return _default_registry
