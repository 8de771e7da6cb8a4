#!/usr/bin/env python3
"""
ChatGPT Parser for Chat Share Parser
Extracts conversations from ChatGPT shared links.

ChatGPT share pages stream their loader data through React Router as a
flattened array passed to streamController.enqueue(...). The structured
strategy rebuilds the conversation mapping from that array; the heuristic
strategy pairs content strings with nearby role markers when the mapping
cannot be rebuilt.
"""

import logging
from typing import Optional, List, Dict, Any

from models import ParsedMessage, Platform
from parsers.base_parser import BaseParser
from parsers.html_fallback import og_title_of
from parsers.payload_locator import (
    locate_stream_payload,
    find_stream_arrays,
    DEFAULT_MIN_STREAM_PAYLOAD_LENGTH,
)
from parsers.pointer_resolver import FlatGraphDecoder
from parsers.role_pairing import (
    RoleContentPairing,
    RoleFallbackPolicy,
    create_role_fallback,
    find_payload_title,
    DEFAULT_TITLE as CHATGPT_DEFAULT_TITLE,
)
from parsers.strategies import ExtractionStrategy, ExtractionResult, PageContent

logger = logging.getLogger(__name__)

class StructuredStreamStrategy(ExtractionStrategy):
    """Rebuild the serverResponse object and walk its message mapping"""

    name = "react_router_structured"

    SERVER_RESPONSE_MARKER = 'serverResponse'
    ROOT_NODE_ID = 'client-created-root'
    MAX_PATH_LENGTH = 10000

    def __init__(self, min_length: int = DEFAULT_MIN_STREAM_PAYLOAD_LENGTH):
        self.min_length = min_length

    def extract(self, page: PageContent) -> Optional[ExtractionResult]:
        heaps = find_stream_arrays(page.html, self.SERVER_RESPONSE_MARKER, self.min_length)
        if not heaps:
            return None

        heap = heaps[0]
        marker_index = heap.index(self.SERVER_RESPONSE_MARKER)
        if marker_index + 1 >= len(heap) or not isinstance(heap[marker_index + 1], dict):
            logger.debug("serverResponse marker is not followed by an object")
            return None

        server_response = FlatGraphDecoder(heap).decode_value(heap[marker_index + 1])
        data = server_response.get('data') if isinstance(server_response, dict) else None
        if not isinstance(data, dict):
            return None

        mapping = data.get('mapping')
        if not isinstance(mapping, dict):
            return None

        title = data.get('title')
        if not isinstance(title, str) or not title:
            title = CHATGPT_DEFAULT_TITLE

        node_path = self._node_path(mapping, data.get('current_node'))
        logger.debug(f"Conversation mapping has {len(mapping)} nodes, path of {len(node_path)}")

        messages = []
        for node_id in node_path:
            message = self._node_message(node_id, mapping.get(node_id))
            if message is not None:
                messages.append(message)

        return ExtractionResult(messages=messages, title=title, method=self.name)

    def _node_path(self, mapping: Dict[str, Any], current_node: Any) -> List[str]:
        """
        Order node ids from root to leaf

        From the current node the path follows parent links upward; without
        one it descends from the root along each node's last child.
        """
        path = []
        seen = set()

        if isinstance(current_node, str) and isinstance(mapping.get(current_node), dict):
            cursor = current_node
            while cursor and cursor not in seen:
                seen.add(cursor)
                path.append(cursor)
                node = mapping.get(cursor)
                parent = node.get('parent') if isinstance(node, dict) else None
                cursor = parent if isinstance(parent, str) else None
            path.reverse()
            return path

        cursor = self.ROOT_NODE_ID
        while cursor and cursor not in seen and len(path) < self.MAX_PATH_LENGTH:
            seen.add(cursor)
            path.append(cursor)
            node = mapping.get(cursor)
            children = node.get('children') if isinstance(node, dict) else None
            last_child = children[-1] if isinstance(children, list) and children else None
            cursor = last_child if isinstance(last_child, str) else None
        return path

    def _node_message(self, node_id: str, node: Any) -> Optional[ParsedMessage]:
        if not isinstance(node, dict):
            return None

        message = node.get('message')
        if not isinstance(message, dict):
            return None

        author = message.get('author')
        role = author.get('role') if isinstance(author, dict) else None
        if role not in ('user', 'assistant'):
            return None

        content = message.get('content')
        if not isinstance(content, dict) or content.get('content_type') != 'text':
            return None

        parts = content.get('parts')
        if not isinstance(parts, list):
            parts = []
        text = ''.join(part for part in parts if isinstance(part, str)).strip()
        if not text:
            return None

        message_id = message.get('id')
        return ParsedMessage(
            id=message_id if isinstance(message_id, str) else node_id,
            role=role,
            content=text,
        )

class HeuristicStreamStrategy(ExtractionStrategy):
    """Pair content strings of the largest stream chunk with role markers"""

    name = "react_router_heuristic"

    def __init__(self, pairing: RoleContentPairing, fallback: RoleFallbackPolicy,
                 min_length: int = DEFAULT_MIN_STREAM_PAYLOAD_LENGTH):
        self.pairing = pairing
        self.fallback = fallback
        self.min_length = min_length

    def extract(self, page: PageContent) -> Optional[ExtractionResult]:
        payload = locate_stream_payload(page.html, self.min_length)
        if payload is None:
            return None

        spans = [span for span in self.pairing.pair(payload) if span.content.strip()]
        if not spans:
            return None

        roles = self.fallback.assign(spans)
        messages = [
            ParsedMessage(id=f"chatgpt-msg-{n}", role=role, content=span.content.strip())
            for n, (span, role) in enumerate(zip(spans, roles))
        ]

        return ExtractionResult(messages=messages, title=find_payload_title(payload), method=self.name)

class ChatGPTParser(BaseParser):
    """Parser for ChatGPT shared conversations"""

    platform = Platform.CHATGPT
    display_name = "ChatGPT"
    DEFAULT_TITLE = CHATGPT_DEFAULT_TITLE
    URL_PATTERNS = [
        r'^https://chatgpt\.com/share/[a-zA-Z0-9-]+$',
        r'^https://chat\.openai\.com/share/[a-zA-Z0-9-]+$',
    ]
    SUPPORTED_PATTERNS = [
        'https://chatgpt.com/share/*',
        'https://chat.openai.com/share/*',
    ]

    def __init__(self, config: Optional[Dict[str, Any]] = None, session=None):
        super().__init__(config, session)
        extraction = self.config.get('extraction', {})
        self.min_stream_length = extraction.get('min_stream_payload_length', DEFAULT_MIN_STREAM_PAYLOAD_LENGTH)
        self.role_fallback = create_role_fallback(extraction.get('role_fallback'))

    def _build_strategies(self) -> List[ExtractionStrategy]:
        return [
            StructuredStreamStrategy(self.min_stream_length),
            HeuristicStreamStrategy(RoleContentPairing(self.config), self.role_fallback,
                                    self.min_stream_length),
        ]

    def _no_messages_message(self, page: PageContent) -> str:
        title = og_title_of(page.soup) or 'the conversation'
        return f"No messages found in {title}. The page format may have changed."
