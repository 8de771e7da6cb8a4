#!/usr/bin/env python3
"""
Payload Locator for Chat Share Parser
Finds the conversation data blob a share page embeds in its markup.
"""

import json
import re
import logging
from dataclasses import dataclass
from typing import Optional, List, Any

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# React Router streaming emission: streamController.enqueue("<json-escaped text>")
STREAM_ENQUEUE_PATTERN = re.compile(r'streamController\.enqueue\("((?:[^"\\]|\\.)*)"\)')

DEFAULT_MIN_STREAM_PAYLOAD_LENGTH = 1000

_decoder = json.JSONDecoder()

@dataclass
class StreamCandidate:
    """One streamed chunk, unescaped once"""
    raw: str
    text: str

def unescape_stream_literal(raw: str) -> str:
    """Stage 1: undo the JSON string-literal escaping of a captured argument"""
    return json.loads('"' + raw + '"')

def parse_stream_text(text: str) -> Any:
    """Stage 2: parse the unescaped text as JSON"""
    return json.loads(text)

def decode_stream_payload(raw: str) -> Any:
    """
    Decode a captured enqueue argument into its value

    The argument is JSON text that was itself serialized as a JSON string
    literal, so decoding takes two passes.

    Args:
        raw: Escaped text captured from between the enqueue quotes

    Returns:
        The decoded value (normally a flat list)

    Raises:
        ValueError: If either stage fails to decode
    """
    return parse_stream_text(unescape_stream_literal(raw))

def find_stream_candidates(html: str) -> List[StreamCandidate]:
    """Collect every enqueue call whose argument unescapes cleanly"""
    candidates = []
    for match in STREAM_ENQUEUE_PATTERN.finditer(html):
        raw = match.group(1)
        try:
            candidates.append(StreamCandidate(raw=raw, text=unescape_stream_literal(raw)))
        except ValueError:
            logger.debug(f"Skipping undecodable stream chunk ({len(raw)} chars)")
    logger.debug(f"Found {len(candidates)} stream chunks")
    return candidates

def locate_stream_payload(html: str, min_length: int = DEFAULT_MIN_STREAM_PAYLOAD_LENGTH) -> Optional[list]:
    """
    Locate the conversation payload among streamed chunks

    The conversation is the largest chunk the page emits; smaller chunks
    carry UI chrome and config.

    Args:
        html: Raw page HTML
        min_length: Smallest decoded length accepted as conversation data

    Returns:
        The decoded flat array, or None if nothing plausible was found
    """
    candidates = find_stream_candidates(html)
    if not candidates:
        return None

    best = max(candidates, key=lambda candidate: len(candidate.text))
    if len(best.text) < min_length:
        logger.debug(f"Largest stream chunk is {len(best.text)} chars, below minimum of {min_length}")
        return None

    try:
        payload = parse_stream_text(best.text)
    except ValueError as e:
        logger.debug(f"Largest stream chunk is not JSON: {e}")
        return None

    if not isinstance(payload, list):
        logger.debug("Largest stream chunk is not a flat array")
        return None

    return payload

def find_stream_arrays(html: str, marker: str, min_length: int = DEFAULT_MIN_STREAM_PAYLOAD_LENGTH) -> List[list]:
    """
    Decode all streamed arrays that contain a marker string

    Args:
        html: Raw page HTML
        marker: String value the array must contain (e.g. 'serverResponse')
        min_length: Smallest decoded length accepted

    Returns:
        Matching arrays, largest first
    """
    matches = []
    for candidate in find_stream_candidates(html):
        if len(candidate.text) < min_length:
            continue
        try:
            payload = parse_stream_text(candidate.text)
        except ValueError:
            continue
        if isinstance(payload, list) and marker in payload:
            matches.append((len(payload), len(candidate.text), payload))
    matches.sort(key=lambda match: match[:2], reverse=True)
    return [payload for _, _, payload in matches]

def extract_script_json(soup: BeautifulSoup, element_id: str) -> Optional[Any]:
    """
    Parse the text of a <script id=...> data island as JSON

    Args:
        soup: Parsed page
        element_id: The script element id (e.g. '__NEXT_DATA__')

    Returns:
        Parsed JSON, or None if the tag is missing or not JSON
    """
    script = soup.find('script', id=element_id)
    if script is None:
        return None

    text = script.string or script.get_text()
    if not text or not text.strip():
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Failed to parse #{element_id} script: {e}")
        return None

def iter_script_texts(soup: BeautifulSoup):
    """Yield the non-empty text of every script tag, in document order"""
    for script in soup.find_all('script'):
        text = script.string or script.get_text()
        if text and text.strip():
            yield text

def decode_json_at(text: str, start: int) -> Optional[Any]:
    """Decode the JSON value beginning at text[start], ignoring what follows"""
    try:
        value, _ = _decoder.raw_decode(text, start)
        return value
    except json.JSONDecodeError:
        return None

def extract_json_after(text: str, pattern: re.Pattern) -> Optional[Any]:
    """
    Decode the JSON value that starts where a prefix pattern ends

    Each match of the prefix is tried in turn, so a broken first occurrence
    does not hide a later valid one.

    Args:
        text: Script text to search
        pattern: Compiled regex ending right before the JSON value

    Returns:
        The first value that decodes, or None
    """
    for match in pattern.finditer(text):
        value = decode_json_at(text, match.end())
        if value is not None:
            return value
    return None

def extract_assigned_json(text: str, variable: str) -> Optional[Any]:
    """Decode the object assigned as `window.<variable> = {...}`"""
    pattern = re.compile(r'window\.' + re.escape(variable) + r'\s*=\s*(?=[\[{])')
    return extract_json_after(text, pattern)
