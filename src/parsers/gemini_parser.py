#!/usr/bin/env python3
"""
Gemini Parser for Chat Share Parser
Extracts conversations from Gemini shared links.

Gemini share pages have carried their conversation in several shapes over
time: window-level state objects, AF_initDataCallback payloads, batched
"wrb.fr" RPC arrays, or only the rendered markup.
"""

import re
import logging
from typing import Optional, List, Dict, Any

from models import MessageRole, ParsedMessage, Platform
from parsers.base_parser import BaseParser
from parsers.html_fallback import DomFallbackStrategy, find_page_title
from parsers.payload_locator import (
    extract_assigned_json,
    extract_json_after,
    decode_json_at,
    iter_script_texts,
)
from parsers.strategies import ExtractionStrategy, ExtractionResult, PageContent, first_present, first_list

logger = logging.getLogger(__name__)

GEMINI_DEFAULT_TITLE = 'Gemini Conversation'

AF_INIT_DATA_PATTERN = re.compile(r'AF_initDataCallback\(\{[^}]*?data:\s*(?=\[)')
CONVERSATION_KEY_PATTERN = re.compile(r'"conversation":\s*(?=\{)')
WRB_BATCH_PATTERN = re.compile(r'\[\s*\[\s*"wrb\.fr"')

USER_ROLE_VALUES = frozenset(['user', 'USER', 'human', '0'])
ASSISTANT_ROLE_VALUES = frozenset(['model', 'MODEL', 'assistant', 'gemini', '1'])

MAX_SEARCH_DEPTH = 32

class ScriptDataStrategy(ExtractionStrategy):
    """Find a conversation object in script-embedded state"""

    name = "script_data"

    MESSAGE_LIST_KEYS = ['messages', 'turns', 'conversation']
    CONTAINER_KEYS = ['conversation', 'data', 'sharedConversation', 'chat', 'thread']
    MESSAGE_FIELDS = ('role', 'author', 'text', 'content')

    def extract(self, page: PageContent) -> Optional[ExtractionResult]:
        empty = None
        for text in iter_script_texts(page.soup):
            for data in self._candidates(text):
                result = self._from_data(data)
                if result is None:
                    continue
                if result.success:
                    return result
                empty = empty or result
        return empty

    def _candidates(self, text: str):
        """Yield decoded values for each known embedding in priority order"""
        if '__INITIAL_STATE__' in text:
            yield extract_assigned_json(text, '__INITIAL_STATE__')
        if '__DATA__' in text:
            yield extract_assigned_json(text, '__DATA__')
        if 'AF_initDataCallback' in text:
            yield extract_json_after(text, AF_INIT_DATA_PATTERN)
        if '"conversation"' in text:
            yield extract_json_after(text, CONVERSATION_KEY_PATTERN)

    def _from_data(self, data: Any) -> Optional[ExtractionResult]:
        if not isinstance(data, (dict, list)):
            return None

        conversation = self._find_conversation(data)
        if conversation is None:
            if self._is_empty_conversation(data):
                logger.debug("Found a conversation with no messages")
                return ExtractionResult(messages=[], method=self.name, conversation_found=True)
            return None

        records = first_present(conversation, self.MESSAGE_LIST_KEYS)
        if not isinstance(records, list):
            return None

        messages = parse_message_records(records)
        title = first_present(conversation, ['title', 'name'])
        return ExtractionResult(messages=messages, title=title, method=self.name,
                                conversation_found=True)

    def _find_conversation(self, data: Any, depth: int = 0) -> Optional[Dict[str, Any]]:
        """
        Locate the object holding the message list

        Checks the object itself, then the common container keys, then
        searches nested values for a list of message-like objects.
        """
        if depth > MAX_SEARCH_DEPTH:
            return None

        if isinstance(data, dict):
            if self._holds_messages(data):
                return data
            for key in self.CONTAINER_KEYS:
                nested = data.get(key)
                if isinstance(nested, dict) and self._holds_messages(nested):
                    return nested
            values = list(data.values())
        elif isinstance(data, list) and depth == 0:
            values = data
        else:
            return None

        for value in values:
            if self._is_message_list(value):
                return {'messages': value}
            if isinstance(value, dict):
                found = self._find_conversation(value, depth + 1)
                if found is not None:
                    return found
        return None

    def _holds_messages(self, record: Dict[str, Any]) -> bool:
        return isinstance(first_present(record, self.MESSAGE_LIST_KEYS), list)

    def _is_empty_conversation(self, data: Any) -> bool:
        """Whether the object or one of its containers holds an empty message list"""
        if not isinstance(data, dict):
            return False
        candidates = [data] + [data.get(key) for key in self.CONTAINER_KEYS]
        return any(
            isinstance(candidate, dict) and first_list(candidate, self.MESSAGE_LIST_KEYS) == []
            for candidate in candidates
        )

    def _is_message_list(self, value: Any) -> bool:
        if not isinstance(value, list) or not value:
            return False
        first = value[0]
        return isinstance(first, dict) and any(field in first for field in self.MESSAGE_FIELDS)

def parse_message_records(records: List[Any]) -> List[ParsedMessage]:
    """
    Convert Gemini message records into messages

    Roles come from the role/author field; unknown values alternate by
    position. Records without text are skipped.
    """
    messages = []
    for idx, record in enumerate(records):
        if not isinstance(record, dict):
            continue

        content = _record_text(record).strip()
        if not content:
            continue

        messages.append(ParsedMessage(
            id=record.get('id') or f"gemini-msg-{idx}",
            role=_record_role(record, idx),
            content=content,
        ))
    return messages

def _record_role(record: Dict[str, Any], idx: int) -> MessageRole:
    value = first_present(record, ['role', 'author'])
    value = str(value) if value is not None else None
    if value in USER_ROLE_VALUES:
        return MessageRole.USER
    if value in ASSISTANT_ROLE_VALUES:
        return MessageRole.ASSISTANT
    return MessageRole.USER if idx % 2 == 0 else MessageRole.ASSISTANT

def _record_text(record: Dict[str, Any]) -> str:
    if isinstance(record.get('text'), str):
        return record['text']

    content = record.get('content')
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return _join_text_parts(content)

    parts = record.get('parts')
    if isinstance(parts, list):
        return _join_text_parts(parts)

    return ''

def _join_text_parts(parts: List[Any]) -> str:
    texts = [
        part['text'] for part in parts
        if isinstance(part, dict) and isinstance(part.get('text'), str) and part['text']
    ]
    return '\n'.join(texts)

class WrbDataStrategy(ExtractionStrategy):
    """Collect text-bearing objects from batched wrb.fr RPC arrays"""

    name = "wrb_data"

    def extract(self, page: PageContent) -> Optional[ExtractionResult]:
        for text in iter_script_texts(page.soup):
            if 'wrb.fr' not in text:
                continue

            for match in WRB_BATCH_PATTERN.finditer(text):
                data = decode_json_at(text, match.start())
                if not isinstance(data, list):
                    continue

                messages = []
                self._collect(data, messages, 0)
                if messages:
                    return ExtractionResult(messages=messages, method=self.name)

        return None

    def _collect(self, items: List[Any], messages: List[ParsedMessage], depth: int):
        if depth > MAX_SEARCH_DEPTH:
            return

        for item in items:
            if isinstance(item, list):
                self._collect(item, messages, depth + 1)
            elif isinstance(item, dict):
                content = first_present(item, ['text', 'content'])
                if not isinstance(content, str) or not content.strip():
                    continue
                is_user = item.get('author') == 'user' or item.get('role') == 'user'
                messages.append(ParsedMessage(
                    id=item.get('id') or f"gemini-wrb-{len(messages)}",
                    role=MessageRole.USER if is_user else MessageRole.ASSISTANT,
                    content=content.strip(),
                ))

def _gemini_page_title(soup) -> Optional[str]:
    return find_page_title(soup, affixes=(' - Gemini', 'Gemini - '), prefer_og=True)

class GeminiParser(BaseParser):
    """Parser for Gemini shared conversations"""

    platform = Platform.GEMINI
    display_name = "Gemini"
    DEFAULT_TITLE = GEMINI_DEFAULT_TITLE
    URL_PATTERNS = [
        r'^https://gemini\.google\.com/share/[a-zA-Z0-9]+$',
        r'^https://g\.co/gemini/share/[a-zA-Z0-9]+$',
    ]
    SUPPORTED_PATTERNS = [
        'https://gemini.google.com/share/*',
        'https://g.co/gemini/share/*',
    ]

    MESSAGE_SELECTORS = [
        '.message-content',
        '.user-query',
        '.model-response',
        '[class*="query"]',
        '[class*="response"]',
        '[class*="turn"]',
        '[data-message-role]',
        '.conversation-turn',
    ]
    CONTAINER_SELECTORS = [
        '[class*="message"]',
        '[class*="chat"]',
        '[class*="conversation"]',
    ]

    def _build_strategies(self) -> List[ExtractionStrategy]:
        return [
            ScriptDataStrategy(),
            WrbDataStrategy(),
            DomFallbackStrategy(
                id_prefix='gemini',
                selectors=self.MESSAGE_SELECTORS,
                user_hints=['user', 'query', 'human'],
                assistant_hints=['model', 'response', 'gemini', 'assistant'],
                role_attributes={
                    'data-message-role': {
                        'user': MessageRole.USER,
                        'model': MessageRole.ASSISTANT,
                        'assistant': MessageRole.ASSISTANT,
                    },
                },
                container_selectors=self.CONTAINER_SELECTORS,
                container_text_bounds=(10, 50000),
                title_finder=_gemini_page_title,
            ),
        ]
