#!/usr/bin/env python3
"""
Output Formatter for Chat Share Parser
Renders parse results as JSON or Markdown.
"""

import json
import logging
from typing import Dict, Any, Optional, List

from models import ParseResult, ParsedMessage, MessageRole

logger = logging.getLogger(__name__)

ROLE_LABELS = {
    MessageRole.USER: "**User**",
    MessageRole.ASSISTANT: "**Assistant**",
}

class ConversationFormatter:
    """Formats parse results for output"""

    SUPPORTED_FORMATS = ('json', 'markdown')

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        output = self.config.get('output', {})
        self.default_format = output.get('format', 'json')
        self.indent = output.get('indent', 2)

    def format_result(self, result: ParseResult, fmt: Optional[str] = None) -> str:
        """
        Format a parse result

        Args:
            result: Successful parse result
            fmt: 'json' or 'markdown'; the configured format when omitted

        Returns:
            Formatted string

        Raises:
            ValueError: If the format is not supported
        """
        fmt = (fmt or self.default_format).lower()
        if fmt not in self.SUPPORTED_FORMATS:
            supported = ', '.join(self.SUPPORTED_FORMATS)
            raise ValueError(f"Unsupported format: {fmt}. Supported formats: {supported}")

        logger.info(f"Formatting {len(result.messages)} messages as {fmt}")

        if fmt == 'json':
            return self.format_json(result)
        return self.format_markdown(result)

    def format_json(self, result: ParseResult) -> str:
        return json.dumps(result.to_dict(), indent=self.indent, ensure_ascii=False)

    def format_markdown(self, result: ParseResult) -> str:
        """
        Format as Markdown: title, source quote, then one section per message
        separated by horizontal rules
        """
        lines = [
            f"# {result.title}",
            "",
            f"> Source: {result.source_url}",
            "",
            "---",
            "",
        ]

        for index, message in enumerate(result.messages):
            lines.extend(self._format_message(message))
            if index < len(result.messages) - 1:
                lines.append("---")
                lines.append("")

        return "\n".join(lines)

    def _format_message(self, message: ParsedMessage) -> List[str]:
        return [
            f"## {ROLE_LABELS[message.role]}",
            "",
            message.content,
            "",
        ]
