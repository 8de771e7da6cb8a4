#!/usr/bin/env python3
"""
HTML-based Extraction for Chat Share Parser
Last-resort extraction from rendered message elements when a page carries no
structured conversation data.
"""

import logging
from typing import Optional, List, Dict, Any, Sequence

from bs4 import BeautifulSoup

from models import MessageRole, ParsedMessage
from parsers.strategies import ExtractionStrategy, ExtractionResult, PageContent

logger = logging.getLogger(__name__)

class DomFallbackStrategy(ExtractionStrategy):
    """
    Strategy for DOM-based extraction

    Candidate selectors are tried in order and the first one matching any
    element wins. Roles come from class-name substrings and attribute values;
    an element with no hint gets a role by alternating on its position,
    starting with the user.
    """

    name = "dom"
    structured = False

    def __init__(self, id_prefix: str, selectors: Sequence[str],
                 user_hints: Sequence[str], assistant_hints: Sequence[str],
                 role_attributes: Optional[Dict[str, Dict[str, MessageRole]]] = None,
                 container_selectors: Sequence[str] = (),
                 container_text_bounds: tuple = (10, 50000),
                 title_finder=None):
        self.id_prefix = id_prefix
        self.selectors = list(selectors)
        self.user_hints = list(user_hints)
        self.assistant_hints = list(assistant_hints)
        self.role_attributes = role_attributes or {}
        self.container_selectors = list(container_selectors)
        self.container_text_bounds = container_text_bounds
        self.title_finder = title_finder

    def extract(self, page: PageContent) -> Optional[ExtractionResult]:
        elements = self._find_message_elements(page.soup)
        if not elements:
            logger.debug("No message elements found in DOM")
            return None

        messages = []
        for position, element in enumerate(elements):
            content = element.get_text().strip()
            if not content:
                continue

            role = self._determine_message_role(element, position)
            messages.append(ParsedMessage(
                id=f"{self.id_prefix}-html-msg-{position}",
                role=role,
                content=content,
                html=element.decode_contents().strip(),
            ))

        if not messages:
            return None

        title = self.title_finder(page.soup) if self.title_finder else None
        return ExtractionResult(messages=messages, title=title, method=self.name)

    def _find_message_elements(self, soup: BeautifulSoup) -> List[Any]:
        for selector in self.selectors:
            elements = soup.select(selector)
            if elements:
                logger.debug(f"Found {len(elements)} elements with selector: {selector}")
                return self._outermost(elements)

        if not self.container_selectors:
            return []

        # Broad containers, kept only when their text is message-sized
        low, high = self.container_text_bounds
        containers = soup.select(', '.join(self.container_selectors))
        sized = [
            element for element in containers
            if low < len(element.get_text().strip()) < high
        ]
        if sized:
            logger.debug(f"Found {len(sized)} message-sized containers as fallback")
        return self._outermost(sized)

    def _outermost(self, elements: List[Any]) -> List[Any]:
        """Drop elements nested inside another matched element"""
        selected = set()
        outermost = []
        for element in elements:
            if any(id(parent) in selected for parent in element.parents):
                continue
            selected.add(id(element))
            outermost.append(element)
        return outermost

    def _determine_message_role(self, element: Any, position: int) -> MessageRole:
        """Determine message role from element hints, else by position"""
        class_str = ' '.join(element.get('class', []))

        is_user = any(hint in class_str for hint in self.user_hints)
        is_assistant = any(hint in class_str for hint in self.assistant_hints)

        for attribute, values in self.role_attributes.items():
            role = values.get(element.get(attribute))
            if role is MessageRole.USER:
                is_user = True
            elif role is MessageRole.ASSISTANT:
                is_assistant = True

        if is_user:
            return MessageRole.USER
        if is_assistant:
            return MessageRole.ASSISTANT

        return MessageRole.USER if position % 2 == 0 else MessageRole.ASSISTANT

def find_page_title(soup: BeautifulSoup, affixes: Sequence[str] = (), prefer_og: bool = False) -> Optional[str]:
    """
    Extract a conversation title from page metadata

    Args:
        soup: Parsed page
        affixes: Platform branding to strip from the <title> text
        prefer_og: Check the og:title meta tag before <title>

    Returns:
        Title string or None
    """
    if prefer_og:
        og_title = og_title_of(soup)
        if og_title:
            return og_title

    element = soup.find('title')
    if element is None:
        return None

    title = element.get_text()
    for affix in affixes:
        title = title.replace(affix, '')
    title = title.strip()
    return title or None

def og_title_of(soup: BeautifulSoup) -> Optional[str]:
    meta = soup.find('meta', attrs={'property': 'og:title'})
    if meta and meta.get('content'):
        return meta['content'].strip() or None
    return None
