#!/usr/bin/env python3
"""
Base Parser for Chat Share Parser
Abstract base class for all platform parsers.
"""

import re
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List, Dict, Any

import requests

from models import ParseResult, Platform
from parsers.errors import (
    InvalidUrlError,
    ConversationNotFoundError,
    NoMessagesFoundError,
    NetworkError,
)
from parsers.strategies import ExtractionStrategy, PageContent, StrategyChain

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
DEFAULT_USER_AGENT = ('Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
                      '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36')
DEFAULT_ACCEPT = 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8'
DEFAULT_ACCEPT_LANGUAGE = 'en-US,en;q=0.5'

# Statuses reported as a missing conversation rather than a network failure
NOT_FOUND_STATUSES = (404, 410)

class BaseParser(ABC):
    """Abstract base class for all platform parsers"""

    platform: Platform = None
    display_name = ""
    DEFAULT_TITLE = "Conversation"
    URL_PATTERNS: List[str] = []
    SUPPORTED_PATTERNS: List[str] = []

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 session: Optional[requests.Session] = None):
        self.config = config or {}
        self.session = session
        self._url_patterns = [re.compile(pattern) for pattern in self.URL_PATTERNS]

        fetch = self.config.get('fetch', {})
        self.timeout = fetch.get('timeout', DEFAULT_TIMEOUT)
        self.headers = {
            'User-Agent': fetch.get('user_agent', DEFAULT_USER_AGENT),
            'Accept': fetch.get('accept', DEFAULT_ACCEPT),
            'Accept-Language': fetch.get('accept_language', DEFAULT_ACCEPT_LANGUAGE),
        }

    def can_parse(self, url: str) -> bool:
        """Check if URL is a share link for this platform"""
        if not url:
            return False
        url = url.strip()
        return any(pattern.match(url) for pattern in self._url_patterns)

    def get_supported_patterns(self) -> List[str]:
        return list(self.SUPPORTED_PATTERNS)

    def parse(self, url: str) -> ParseResult:
        """
        Parse a shared conversation from URL

        Args:
            url: The share URL to parse

        Returns:
            ParseResult with at least one message

        Raises:
            InvalidUrlError: If the URL is not a share link for this platform
            ConversationNotFoundError: If the page does not exist
            NetworkError: If the page could not be retrieved
            NoMessagesFoundError: If no extraction strategy found messages
        """
        if not self.can_parse(url):
            raise InvalidUrlError(f"Invalid {self.display_name} share URL", platform=self.platform.value)

        url = url.strip()
        logger.info(f"Starting extraction from {url}")

        html = self._fetch_html(url)
        return self.parse_html(html, url)

    def parse_html(self, html: str, url: str) -> ParseResult:
        """
        Parse an already retrieved share page

        Args:
            html: Page HTML
            url: Share URL the page came from

        Returns:
            ParseResult with at least one message

        Raises:
            NoMessagesFoundError: If no extraction strategy found messages
        """
        page = PageContent.from_html(html)
        chain = StrategyChain(self._build_strategies())
        result, history = chain.run(page)

        if result is None:
            raise NoMessagesFoundError(self._no_messages_message(page), platform=self.platform.value)

        logger.info(f"Successfully extracted {len(result.messages)} messages using {result.method}")

        return ParseResult(
            title=result.title or self.DEFAULT_TITLE,
            source_url=url,
            messages=result.messages,
            platform=self.platform,
            method=result.method,
            metadata={
                'extracted_at': datetime.now().isoformat(),
                'strategy_history': history,
            },
        )

    def _fetch_html(self, url: str) -> str:
        """
        Fetch HTML content from URL

        A session is created per call unless one was injected, so a parser
        can be shared between threads.

        Raises:
            ConversationNotFoundError: On 404/410
            NetworkError: On timeout, connection failure or another non-2xx status
        """
        if self.session is not None:
            return self._get(self.session, url)

        with requests.Session() as session:
            return self._get(session, url)

    def _get(self, session: requests.Session, url: str) -> str:
        platform = self.platform.value
        logger.debug(f"Fetching HTML (timeout {self.timeout}s)")

        try:
            response = session.get(url, headers=self.headers, timeout=self.timeout, allow_redirects=True)
        except requests.Timeout as e:
            raise NetworkError(f"Timed out fetching {url}: {e}", kind=NetworkError.TIMEOUT,
                               platform=platform) from e
        except requests.RequestException as e:
            raise NetworkError(f"Failed to fetch {url}: {e}", kind=NetworkError.UNREACHABLE,
                               platform=platform) from e

        status = response.status_code
        if status in NOT_FOUND_STATUSES:
            raise ConversationNotFoundError(f"{self.display_name} conversation not found", platform=platform)
        if not 200 <= status < 300:
            raise NetworkError(f"Failed to fetch URL: {status}", kind=NetworkError.BAD_STATUS,
                               platform=platform, status_code=status)

        logger.debug(f"Successfully fetched HTML ({len(response.text)} characters)")
        return response.text

    def _no_messages_message(self, page: PageContent) -> str:
        return (f"No messages found in {self.display_name} conversation. "
                "The page format may have changed.")

    @abstractmethod
    def _build_strategies(self) -> List[ExtractionStrategy]:
        """
        Build this platform's extraction strategies in priority order
        This method must be implemented by each platform parser
        """
        pass
