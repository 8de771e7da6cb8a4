#!/usr/bin/env python3
"""
Content Classifier for Chat Share Parser
Separates genuine message text from structural noise in flattened payloads.
"""

import re
import logging
from typing import Any

logger = logging.getLogger(__name__)

# Keys, enum tokens and tracing fields that sit in string slots of the payload
METADATA_KEYWORDS = frozenset([
    'user', 'assistant', 'system', 'text', 'parts', 'role', 'content',
    'metadata', 'author', 'message', 'status', 'finished_successfully',
    'all', 'recipient', 'weight', 'end_turn', 'children', 'parent',
    'id', 'mapping', 'create_time', 'update_time', 'model_slug',
    'default_model_slug', 'parent_id', 'channel', 'final', 'stop', 'stop_tokens',
    'finish_details', 'is_complete', 'citations', 'content_references', 'message_type',
    'next', 'origin', 'ntp', 'client_id', 'client_capability_version', 'sources',
    'request_id', 'message_source', 'turn_exchange_id', 'rebase_system_message',
    'sonic_classification_result', 'latency_ms', 'search_decision', 'classifier_config',
    'content_type', 'is_visually_hidden_from_conversation', 'shared_conversation_id',
    'loaderData', 'root', 'dd', 'traceId', 'traceTime', 'disablePrefetch',
    'shouldPrefetchAccount', 'shouldPrefetchUser', 'shouldPrefetchSystemHints',
    'promoteCss', 'disableSSR', 'statsigGateEvaluationsPromise', 'sharedConversationId',
    'serverResponse', 'type', 'data', 'client-created-root', 'history_off_approved',
])

_LOWER_METADATA_KEYWORDS = frozenset(keyword.lower() for keyword in METADATA_KEYWORDS)

UUID_PATTERN = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE)
INTEGER_PATTERN = re.compile(r'^\d+$')
DECIMAL_PATTERN = re.compile(r'^\d+\.\d+$')
MODEL_SLUG_PATTERN = re.compile(r'^gpt-\d')
SHORT_TOKEN_PATTERN = re.compile(r'^[a-z0-9]{4,12}$')
_TLD = r'(?:com|org|net|edu|io|co|au)'
DOMAIN_PATTERN = re.compile(rf'^[a-z0-9.-]+\.{_TLD}$', re.IGNORECASE)
DOMAIN_LIST_PATTERN = re.compile(rf'^[a-z0-9.-]+\.{_TLD}(?:,\s*[a-z0-9.-]+\.{_TLD})*$', re.IGNORECASE)

# Cyrillic, Hebrew/Arabic, Thai, Kana, and the Hangul/CJK block span
NON_LATIN_PATTERN = re.compile('[\u0400-\u04FF\u0590-\u06FF\u0E00-\u0E7F\u3040-\u30FF\u3131-\uD79D]')
CODE_PUNCTUATION_PATTERN = re.compile(r'[{}();=]')

# Standalone code detection
STRONG_CODE_PATTERNS = [
    re.compile(r'^import\s+[a-z]', re.IGNORECASE),
    re.compile(r'^from\s+[a-z]', re.IGNORECASE),
    re.compile(r'^def\s+[a-z_]', re.IGNORECASE),
    re.compile(r'^class\s+[A-Z]', re.IGNORECASE),
    re.compile(r'^@[a-z]', re.IGNORECASE),
]

TEXT_LINE_PATTERNS = [
    re.compile(r'^[-*\u2022]'),
    re.compile(r'^\*\*'),
    re.compile(r'^#{1,6}\s'),
    re.compile(r'^\\\('),
    re.compile(r'^\([a-z]\)\s', re.IGNORECASE),
    re.compile(r'^Problem\s+\d', re.IGNORECASE),
    re.compile(r'^Question\s+\d', re.IGNORECASE),
    re.compile(r'^\d+\.\s+[A-Z]', re.IGNORECASE),
]

CODE_LINE_PATTERNS = [
    re.compile(r'^[a-z_][a-z0-9_]*\s*=', re.IGNORECASE),
    re.compile(r'^[a-z_][a-z0-9_]*\s*\([^)]*\)\s*$', re.IGNORECASE),
    re.compile(r'^(while|elif|else|return|print|try|except|with)\s', re.IGNORECASE),
    re.compile(r'^for\s+[a-z_]+\s+in\s+', re.IGNORECASE),
    re.compile(r'^if\s+.+:', re.IGNORECASE),
    re.compile(r'^#[^#]'),
    re.compile(r'^\s*(def|class|import|from)\s', re.IGNORECASE),
    re.compile(r'^[a-z_][a-z0-9_]*\.[a-z]', re.IGNORECASE),
    re.compile(r'^\[\d'),
    re.compile(r'^\{[\'"]'),
]

NUMERIC_EXPRESSION_PATTERN = re.compile(r'^[\d.e\-+*/()\s,\[\]]+$', re.IGNORECASE)
ASSIGNMENT_PATTERN = re.compile(r'^[a-z_][a-z0-9_]*\s*=')

CODE_RATIO_THRESHOLD = 0.7
MAX_TEXT_LINES_FOR_CODE_RATIO = 2
SHORT_CONTENT_THRESHOLD = 300

class ContentClassifier:
    """Heuristic predicates over candidate message strings"""

    @staticmethod
    def is_valid_message_content(value: Any) -> bool:
        """
        Decide whether a payload value is genuine message text

        Rejection rules run first; a survivor must then show at least one
        positive content signal.

        Args:
            value: Candidate value taken from the flattened payload

        Returns:
            True if the value should be treated as message content
        """
        if not isinstance(value, str):
            return False
        if len(value) < 2:
            return False

        if ContentClassifier.is_metadata_keyword(value):
            return False
        if UUID_PATTERN.match(value):
            return False
        if INTEGER_PATTERN.match(value) or DECIMAL_PATTERN.match(value):
            return False
        if MODEL_SLUG_PATTERN.match(value):
            return False
        if SHORT_TOKEN_PATTERN.match(value) and not re.search(r'\s', value):
            return False
        if DOMAIN_PATTERN.match(value) or DOMAIN_LIST_PATTERN.match(value):
            return False
        if value.startswith(('_', '$')):
            return False

        return ContentClassifier.has_content_signal(value)

    @staticmethod
    def is_metadata_keyword(value: str) -> bool:
        return value in METADATA_KEYWORDS or value.lower() in _LOWER_METADATA_KEYWORDS

    @staticmethod
    def has_content_signal(value: str) -> bool:
        """Check for a space, newline, non-Latin script or code punctuation"""
        return (
            ' ' in value
            or '\n' in value
            or NON_LATIN_PATTERN.search(value) is not None
            or CODE_PUNCTUATION_PATTERN.search(value) is not None
        )

    @staticmethod
    def looks_like_standalone_code(content: str) -> bool:
        """
        Check whether content is a bare code block rather than prose

        Args:
            content: Candidate message text

        Returns:
            True if the text is dominated by code lines
        """
        trimmed = content.strip()
        lines = trimmed.split('\n')
        first_line = lines[0].strip()

        if any(pattern.match(first_line) for pattern in STRONG_CODE_PATTERNS):
            return True

        code_lines = 0
        text_lines = 0
        for line in lines:
            stripped = line.strip()
            if not stripped:
                continue
            if ContentClassifier._is_text_line(stripped):
                text_lines += 1
            elif ContentClassifier._is_code_line(stripped):
                code_lines += 1

        classified = code_lines + text_lines
        if classified > 0:
            if code_lines / classified > CODE_RATIO_THRESHOLD and text_lines <= MAX_TEXT_LINES_FOR_CODE_RATIO:
                return True

        if len(trimmed) < SHORT_CONTENT_THRESHOLD:
            if NUMERIC_EXPRESSION_PATTERN.match(trimmed):
                return True
            if ASSIGNMENT_PATTERN.match(trimmed) and '\n\n' not in trimmed:
                has_natural_text = any(
                    re.match(r'^[A-Z][a-z]', line.strip()) and ' ' in line
                    for line in lines
                )
                if not has_natural_text:
                    return True

        return False

    @staticmethod
    def _is_text_line(line: str) -> bool:
        if re.match(r'^[A-Z][a-z]', line) and ' ' in line and len(line) > 30:
            return True
        if any(pattern.match(line) for pattern in TEXT_LINE_PATTERNS):
            return True
        # LaTeX
        if re.match(r'^\\?\[', line) and '\\' in line:
            return True
        if '\\frac' in line or '\\text' in line:
            return True
        # "for any x ..." prose, not a Python loop
        return bool(re.match(r'^for\s+[a-z]+\s+[a-z]+', line, re.IGNORECASE)) and not re.search(r'\s+in\s+', line)

    @staticmethod
    def _is_code_line(line: str) -> bool:
        if any(pattern.match(line) for pattern in CODE_LINE_PATTERNS):
            return True
        # Tuple literal, not an "(a) " label
        return bool(re.match(r'^\([a-z_]', line, re.IGNORECASE)) and not re.match(r'^\([a-z]\)\s', line, re.IGNORECASE)
