#!/usr/bin/env python3
"""
Role-Content Pairing for Chat Share Parser
Pairs validated content spans in a flattened payload with their roles.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from models import MessageRole
from parsers.content_classifier import ContentClassifier
from parsers.pointer_resolver import (
    RoleIndexMap,
    resolve_role,
    role_literal,
    DEFAULT_ROLE_LOOKBACK_WINDOW,
    DEFAULT_ROLE_POINTER_KEY,
)

logger = logging.getLogger(__name__)

# Reasoning/thinking content that should never become a message
REASONING_KEYWORDS = frozenset([
    'reasoning_title', 'reasoning_recap', 'reasoning_status', 'reasoning_ended',
    'thoughts', 'thinking', 'is_reasoning', 'thinking_effort', 'skip_reasoning_title',
    'finished_duration_sec', 'source_analysis_msg_id',
])
REASONING_CONTENT_LOOKAHEAD = 100
MIN_REASONING_CONTENT_LENGTH = 20

FILTERED_CONTENT_TYPES = frozenset([
    'execution_output', 'code', 'tether_browsing_display', 'tether_quote',
    'system_error', 'stderr', 'multimodal_text',
])
FILTERED_ROLES = frozenset(['tool', 'system'])
CODE_EXECUTION_KEYWORDS = frozenset([
    'python', 'code', 'execution_output', 'aggregate_result', 'run_id',
    'start_time', 'end_time', 'final_expression_output', 'in_kernel_exception',
    'system_exception', 'success', 'jupyter_messages', 'jupyter_message_type',
])
CONTEXT_LOOKBEHIND = 50
CONTEXT_LOOKAHEAD = 30

DEFAULT_DEDUPE_PREFIX_LENGTH = 200
DEFAULT_TITLE = 'ChatGPT Conversation'

@dataclass(frozen=True)
class PairedSpan:
    """A content span and its resolved role (None when unresolved)"""
    index: int
    content: str
    role: Optional[MessageRole]

class RoleFallbackPolicy(ABC):
    """Fills in roles the pointer/direct scan could not resolve"""

    name = "base"

    @abstractmethod
    def assign(self, spans: List[PairedSpan]) -> List[MessageRole]:
        """
        Return one role per span, keeping every resolved role as-is

        Args:
            spans: Paired spans in document order

        Returns:
            Roles aligned with spans
        """
        pass

class AlternatingRoleFallback(RoleFallbackPolicy):
    """Unresolved spans take the opposite of the previous message's role"""

    name = "alternate"

    def assign(self, spans: List[PairedSpan]) -> List[MessageRole]:
        roles = []
        last_role = None
        for span in spans:
            if span.role is not None:
                role = span.role
            elif last_role is MessageRole.USER:
                role = MessageRole.ASSISTANT
            else:
                role = MessageRole.USER
            roles.append(role)
            last_role = role
        return roles

class NeighborRoleFallback(RoleFallbackPolicy):
    """
    Unresolved spans are inferred from the nearest resolved neighbor

    Turns are assumed to alternate, so a neighbor at an even distance lends
    its own role and one at an odd distance the opposite role. The previous
    neighbor wins ties. With nothing resolved, roles alternate from user.
    """

    name = "neighbor"

    def assign(self, spans: List[PairedSpan]) -> List[MessageRole]:
        resolved = [i for i, span in enumerate(spans) if span.role is not None]
        roles = []
        for i, span in enumerate(spans):
            if span.role is not None:
                roles.append(span.role)
                continue

            before = [j for j in resolved if j < i]
            after = [j for j in resolved if j > i]
            prev_index = before[-1] if before else None
            next_index = after[0] if after else None

            if prev_index is None and next_index is None:
                roles.append(MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT)
                continue

            if next_index is None or (prev_index is not None and i - prev_index <= next_index - i):
                anchor = prev_index
            else:
                anchor = next_index

            anchor_role = spans[anchor].role
            roles.append(anchor_role if abs(i - anchor) % 2 == 0 else anchor_role.opposite())
        return roles

ROLE_FALLBACK_POLICIES = {
    AlternatingRoleFallback.name: AlternatingRoleFallback,
    NeighborRoleFallback.name: NeighborRoleFallback,
}

def create_role_fallback(name: Optional[str]) -> RoleFallbackPolicy:
    """
    Create a role fallback policy by name

    Raises:
        ValueError: If the name is not a known policy
    """
    name = (name or AlternatingRoleFallback.name).lower()
    if name not in ROLE_FALLBACK_POLICIES:
        supported = ', '.join(ROLE_FALLBACK_POLICIES.keys())
        raise ValueError(f"Unknown role fallback policy: {name}. Supported policies: {supported}")
    return ROLE_FALLBACK_POLICIES[name]()

class RoleContentPairing:
    """Finds content spans in a flat payload and resolves their roles"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        extraction = (config or {}).get('extraction', {})
        self.lookback_window = extraction.get('role_lookback_window', DEFAULT_ROLE_LOOKBACK_WINDOW)
        self.pointer_key = extraction.get('role_pointer_key', DEFAULT_ROLE_POINTER_KEY)
        self.dedupe_prefix_length = extraction.get('dedupe_prefix_length', DEFAULT_DEDUPE_PREFIX_LENGTH)

    def pair(self, payload: List[Any]) -> List[PairedSpan]:
        """
        Emit (role, content) spans in document order

        A span is a single-element list immediately followed by a value the
        content classifier accepts. Reasoning text, tool/code-execution
        output and bare code blocks are dropped, as are repeats of content
        already emitted.

        Args:
            payload: Decoded flat array

        Returns:
            Spans in scan order, role None where unresolved
        """
        role_map = RoleIndexMap.from_payload(payload)
        reasoning_indices = self._find_reasoning_indices(payload)
        logger.debug(f"Payload has {len(payload)} entries, {len(role_map)} role literals, "
                     f"{len(reasoning_indices)} reasoning strings")

        spans = []
        seen_prefixes: Set[str] = set()

        for i in range(len(payload) - 1):
            marker = payload[i]
            if not (isinstance(marker, list) and len(marker) == 1):
                continue

            content_index = i + 1
            candidate = payload[content_index]
            if not ContentClassifier.is_valid_message_content(candidate):
                continue
            if content_index in reasoning_indices:
                continue
            if self._is_filtered_context(payload, content_index):
                continue
            if ContentClassifier.looks_like_standalone_code(candidate):
                continue

            prefix = candidate[:self.dedupe_prefix_length]
            if prefix in seen_prefixes:
                continue
            seen_prefixes.add(prefix)

            role = resolve_role(payload, i, role_map, self.lookback_window, self.pointer_key)
            spans.append(PairedSpan(index=content_index, content=candidate, role=role))

        unresolved = sum(1 for span in spans if span.role is None)
        if unresolved:
            logger.debug(f"{unresolved} of {len(spans)} spans have no resolvable role")

        return spans

    def _find_reasoning_indices(self, payload: List[Any]) -> Set[int]:
        indices = set()
        for i in range(len(payload) - 1):
            value = payload[i]
            if not (isinstance(value, str) and value in REASONING_KEYWORDS):
                continue
            for j in range(i + 1, min(len(payload), i + REASONING_CONTENT_LOOKAHEAD)):
                candidate = payload[j]
                if isinstance(candidate, str) and len(candidate) > MIN_REASONING_CONTENT_LENGTH:
                    indices.add(j)
                if role_literal(candidate) is not None:
                    break
        return indices

    def _is_filtered_context(self, payload: List[Any], index: int) -> bool:
        """Check whether the span belongs to a tool, system or code-execution turn"""
        for j in range(index - 1, max(0, index - CONTEXT_LOOKBEHIND) - 1, -1):
            value = payload[j]
            if isinstance(value, str):
                if value == 'content_type' and j + 1 < len(payload):
                    content_type = payload[j + 1]
                    if isinstance(content_type, str) and content_type in FILTERED_CONTENT_TYPES:
                        return True
                if value in CODE_EXECUTION_KEYWORDS or value in FILTERED_ROLES:
                    return True
            if role_literal(value) is not None:
                break

        for j in range(index + 1, min(len(payload), index + CONTEXT_LOOKAHEAD)):
            value = payload[j]
            if isinstance(value, str) and value in CODE_EXECUTION_KEYWORDS:
                return True
            if role_literal(value) is not None:
                break

        return False

def find_payload_title(payload: List[Any], default: str = DEFAULT_TITLE) -> str:
    """Return the string that follows the first 'title' literal"""
    for i in range(len(payload) - 1):
        if payload[i] == 'title' and isinstance(payload[i + 1], str) and payload[i + 1]:
            return payload[i + 1]
    return default
