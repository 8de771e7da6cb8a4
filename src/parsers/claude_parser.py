#!/usr/bin/env python3
"""
Claude Parser for Chat Share Parser
Extracts conversations from Claude shared links.
"""

import logging
from typing import Optional, List, Dict, Any

from models import MessageRole, ParsedMessage, Platform
from parsers.base_parser import BaseParser
from parsers.html_fallback import DomFallbackStrategy, find_page_title
from parsers.payload_locator import extract_script_json, extract_assigned_json, iter_script_texts
from parsers.strategies import (
    ExtractionStrategy,
    ExtractionResult,
    PageContent,
    FieldPath,
    first_present,
    first_list,
)

logger = logging.getLogger(__name__)

CLAUDE_DEFAULT_TITLE = 'Claude Conversation'

SENDER_ROLES = {
    'human': MessageRole.USER,
    'user': MessageRole.USER,
    'assistant': MessageRole.ASSISTANT,
}

class NextDataStrategy(ExtractionStrategy):
    """Read the conversation from the Next.js __NEXT_DATA__ script"""

    name = "next_data"

    FIELD_PATHS = [
        FieldPath('sharedConversation', ('props', 'pageProps', 'sharedConversation')),
        FieldPath('conversation', ('props', 'pageProps', 'conversation')),
    ]

    def extract(self, page: PageContent) -> Optional[ExtractionResult]:
        data = extract_script_json(page.soup, '__NEXT_DATA__')
        if data is None:
            return None

        conversation = None
        for path in self.FIELD_PATHS:
            conversation = path.resolve(data)
            if conversation:
                logger.debug(f"Found conversation at {path.name}")
                break

        if not isinstance(conversation, dict):
            return None

        chat_messages = conversation.get('chat_messages')
        if not isinstance(chat_messages, list):
            return None

        records = [
            msg for msg in chat_messages
            if isinstance(msg, dict) and msg.get('sender') in ('human', 'assistant')
        ]

        messages = []
        for idx, msg in enumerate(records):
            content = self._message_text(msg).strip()
            if not content:
                continue
            messages.append(ParsedMessage(
                id=msg.get('uuid') or f"claude-msg-{idx}",
                role=SENDER_ROLES[msg['sender']],
                content=content,
            ))

        title = conversation.get('name') or CLAUDE_DEFAULT_TITLE
        return ExtractionResult(messages=messages, title=title, method=self.name,
                                conversation_found=True)

    def _message_text(self, msg: Dict[str, Any]) -> str:
        """Join text blocks of the content array, else use the text field"""
        blocks = msg.get('content')
        if isinstance(blocks, list):
            texts = [
                block['text'] for block in blocks
                if isinstance(block, dict) and block.get('type') == 'text'
                and isinstance(block.get('text'), str) and block['text']
            ]
            if texts:
                return '\n'.join(texts)

        text = msg.get('text')
        return text if isinstance(text, str) else ''

class EmbeddedDataStrategy(ExtractionStrategy):
    """Read the conversation assigned to window.__CLAUDE_DATA__"""

    name = "embedded_data"

    CONVERSATION_KEYS = ['conversation', 'sharedConversation', 'chat', 'data']
    MESSAGE_LIST_KEYS = ['messages', 'chat_messages']
    TITLE_KEYS = ['name', 'title']
    SENDER_KEYS = ['sender', 'role']
    TEXT_KEYS = ['text', 'content']
    ID_KEYS = ['uuid', 'id']

    def extract(self, page: PageContent) -> Optional[ExtractionResult]:
        empty = None
        for text in iter_script_texts(page.soup):
            if '__CLAUDE_DATA__' not in text:
                continue

            data = extract_assigned_json(text, '__CLAUDE_DATA__')
            result = self._from_data(data)
            if result is None:
                continue
            if result.success:
                return result
            empty = result

        return empty

    def _from_data(self, data: Any) -> Optional[ExtractionResult]:
        if not isinstance(data, dict):
            return None

        conversation = first_present(data, self.CONVERSATION_KEYS)
        if not isinstance(conversation, dict):
            return None

        records = first_list(conversation, self.MESSAGE_LIST_KEYS)
        if records is None:
            return None

        messages = []
        for idx, msg in enumerate(r for r in records if self._has_known_sender(r)):
            content = first_present(msg, self.TEXT_KEYS)
            if not isinstance(content, str) or not content.strip():
                continue
            sender = first_present(msg, self.SENDER_KEYS)
            messages.append(ParsedMessage(
                id=first_present(msg, self.ID_KEYS) or f"claude-msg-{idx}",
                role=SENDER_ROLES.get(sender, MessageRole.ASSISTANT),
                content=content.strip(),
            ))

        title = first_present(conversation, self.TITLE_KEYS) or CLAUDE_DEFAULT_TITLE
        return ExtractionResult(messages=messages, title=title, method=self.name,
                                conversation_found=True)

    def _has_known_sender(self, msg: Any) -> bool:
        if not isinstance(msg, dict):
            return False
        return msg.get('sender') in ('human', 'assistant') or msg.get('role') in ('user', 'assistant')

def _claude_page_title(soup) -> Optional[str]:
    return find_page_title(soup, affixes=(' - Claude',))

class ClaudeParser(BaseParser):
    """Parser for Claude shared conversations"""

    platform = Platform.CLAUDE
    display_name = "Claude"
    DEFAULT_TITLE = CLAUDE_DEFAULT_TITLE
    URL_PATTERNS = [
        r'^https://claude\.ai/share/[a-zA-Z0-9-]+$',
    ]
    SUPPORTED_PATTERNS = [
        'https://claude.ai/share/*',
    ]

    # Rendered message containers, most specific first
    MESSAGE_SELECTORS = [
        '[data-testid="message"]',
        '.message-content',
        '.conversation-message',
        '[class*="Message"]',
        '[class*="message"]',
    ]

    def _build_strategies(self) -> List[ExtractionStrategy]:
        return [
            NextDataStrategy(),
            EmbeddedDataStrategy(),
            DomFallbackStrategy(
                id_prefix='claude',
                selectors=self.MESSAGE_SELECTORS,
                user_hints=['human', 'user'],
                assistant_hints=['assistant', 'claude'],
                role_attributes={
                    'data-sender': {'human': MessageRole.USER, 'assistant': MessageRole.ASSISTANT},
                    'data-role': {'user': MessageRole.USER, 'assistant': MessageRole.ASSISTANT},
                },
                title_finder=_claude_page_title,
            ),
        ]
