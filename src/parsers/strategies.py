#!/usr/bin/env python3
"""
Extraction Strategies for Chat Share Parser
Ordered fallback chains of named extraction strategies.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import cached_property
from typing import Optional, List, Dict, Any, Sequence, Tuple

from bs4 import BeautifulSoup

from models import ParsedMessage

logger = logging.getLogger(__name__)

class ExtractionResult:
    """Container for one strategy's output"""

    def __init__(self, messages: List[ParsedMessage], title: Optional[str] = None,
                 method: Optional[str] = None, conversation_found: bool = False):
        self.messages = messages
        self.title = title
        self.method = method  # Which strategy produced the messages
        self.success = len(messages) > 0
        # Structured data was present even if it held no messages
        self.conversation_found = conversation_found or self.success

class PageContent:
    """A fetched page; the parsed tree is built on first use"""

    def __init__(self, html: str):
        self.html = html

    @classmethod
    def from_html(cls, html: str) -> "PageContent":
        return cls(html)

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, 'html.parser')

class ExtractionStrategy(ABC):
    """Abstract base class for extraction strategies"""

    name = "strategy"
    # False for strategies that read rendered markup rather than page data
    structured = True

    @abstractmethod
    def extract(self, page: PageContent) -> Optional[ExtractionResult]:
        """
        Extract conversation data using this strategy

        Returns:
            ExtractionResult, or None when the strategy finds nothing
        """
        pass

@dataclass(frozen=True)
class FieldPath:
    """A named location of a conversation object inside a JSON document"""
    name: str
    keys: Tuple[str, ...]

    def resolve(self, data: Any) -> Optional[Any]:
        current = data
        for key in self.keys:
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
        return current

def first_present(record: Dict[str, Any], keys: Sequence[str]) -> Any:
    """Return the first truthy value among keys, in priority order"""
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return None

def first_list(record: Dict[str, Any], keys: Sequence[str]) -> Optional[list]:
    """Return the first non-empty list among keys, else the first empty one"""
    empty = None
    for key in keys:
        value = record.get(key)
        if isinstance(value, list):
            if value:
                return value
            if empty is None:
                empty = value
    return empty

class StrategyChain:
    """Runs strategies in priority order and returns the first success"""

    def __init__(self, strategies: List[ExtractionStrategy]):
        self.strategies = strategies

    def run(self, page: PageContent) -> Tuple[Optional[ExtractionResult], List[Dict[str, Any]]]:
        """
        Try each strategy until one yields messages

        A strategy that raises is logged and skipped. Once a structured
        strategy has found a conversation without messages, markup
        strategies are skipped so page chrome is never taken for messages.

        Args:
            page: The fetched page

        Returns:
            Tuple of (first successful result or None, attempt history)
        """
        history = []
        conversation_found = False

        for i, strategy in enumerate(self.strategies, 1):
            if conversation_found and not strategy.structured:
                logger.debug(f"Skipping {strategy.name}: page data holds an empty conversation")
                history.append({'strategy': strategy.name, 'success': False, 'skipped': True})
                continue

            logger.debug(f"Attempting strategy {i}/{len(self.strategies)}: {strategy.name}")

            try:
                result = strategy.extract(page)
            except Exception as e:
                logger.debug(f"{strategy.name} failed with error: {e}")
                history.append({'strategy': strategy.name, 'success': False, 'error': str(e)})
                continue

            if result is not None and result.success:
                result.method = result.method or strategy.name
                history.append({'strategy': strategy.name, 'success': True,
                                'message_count': len(result.messages)})
                logger.info(f"{strategy.name} succeeded: {len(result.messages)} messages")
                return result, history

            if result is not None and result.conversation_found:
                conversation_found = True
            history.append({'strategy': strategy.name, 'success': False})
            logger.debug(f"{strategy.name} found no messages")

        logger.warning("All extraction strategies failed")
        return None, history
