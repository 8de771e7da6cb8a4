#!/usr/bin/env python3
"""
Tests for ParserRegistry
"""

import unittest
from unittest import mock
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from models import Platform
from parsers.registry import ParserRegistry, get_default_registry
from parsers.chatgpt_parser import ChatGPTParser
from parsers.claude_parser import ClaudeParser
from parsers.gemini_parser import GeminiParser
from parsers.errors import UnsupportedPlatformError

class TestParserRegistry(unittest.TestCase):
    """Test cases for ParserRegistry"""

    def setUp(self):
        self.registry = ParserRegistry()

    def test_builtin_parsers(self):
        self.assertEqual(self.registry.get_supported_platforms(), ['chatgpt', 'claude', 'gemini'])
        self.assertEqual(len(self.registry.get_parsers()), 3)

    def test_dispatch_by_url(self):
        cases = {
            "https://chatgpt.com/share/688759e5-ee2c-8002-9c42-bd3638c2f625": Platform.CHATGPT,
            "https://chat.openai.com/share/abc123": Platform.CHATGPT,
            "https://claude.ai/share/3f2b1c9e-1111": Platform.CLAUDE,
            "https://gemini.google.com/share/dd9051d9712f": Platform.GEMINI,
            "https://g.co/gemini/share/dd9051d9712f": Platform.GEMINI,
        }
        for url, platform in cases.items():
            with self.subTest(url=url):
                self.assertTrue(self.registry.can_parse(url))
                self.assertEqual(self.registry.get_parser(url).platform, platform)

    def test_unsupported_url(self):
        self.assertIsNone(self.registry.get_parser("https://example.com/x"))
        self.assertFalse(self.registry.can_parse("https://example.com/x"))

        with self.assertRaises(UnsupportedPlatformError) as ctx:
            self.registry.parse("https://example.com/x")

        self.assertEqual(ctx.exception.url, "https://example.com/x")
        self.assertEqual(ctx.exception.error_type, "unsupported_platform")

    def test_parse_delegates_to_matched_parser(self):
        parser = ClaudeParser()
        registry = ParserRegistry(parsers=[parser])

        with mock.patch.object(parser, 'parse', return_value='result') as parse:
            self.assertEqual(registry.parse("https://claude.ai/share/abc"), 'result')

        parse.assert_called_once_with("https://claude.ai/share/abc")

    def test_duplicate_registration_is_ignored(self):
        first = ClaudeParser()
        registry = ParserRegistry(parsers=[first])

        registry.register(ClaudeParser())

        self.assertEqual(registry.get_parsers(), (first,))

    def test_unregister(self):
        self.registry.unregister(Platform.CLAUDE)
        self.registry.unregister('gemini')
        self.registry.unregister('missing')

        self.assertEqual(self.registry.get_supported_platforms(), ['chatgpt'])
        self.assertFalse(self.registry.can_parse("https://claude.ai/share/abc"))

    def test_isolated_registries(self):
        registry = ParserRegistry(parsers=[GeminiParser()])

        self.assertEqual(registry.get_supported_patterns(),
                         ['https://gemini.google.com/share/*', 'https://g.co/gemini/share/*'])
        self.assertEqual(len(self.registry.get_parsers()), 3)

    def test_parsers_share_config(self):
        config = {'extraction': {'role_fallback': 'neighbor'}}
        registry = ParserRegistry(config=config)

        chatgpt = registry.get_parser("https://chatgpt.com/share/abc")
        self.assertIsInstance(chatgpt, ChatGPTParser)
        self.assertEqual(chatgpt.role_fallback.name, 'neighbor')

    def test_registration_during_lookup(self):
        claude = ClaudeParser()
        registry = ParserRegistry(parsers=[claude])

        def can_parse(url):
            registry.register(GeminiParser())
            return False

        with mock.patch.object(claude, 'can_parse', side_effect=can_parse):
            self.assertIsNone(registry.get_parser("https://example.com/x"))

        self.assertEqual(registry.get_supported_platforms(), ['claude', 'gemini'])

    def test_get_parsers_is_read_only(self):
        self.assertIsInstance(self.registry.get_parsers(), tuple)

    def test_default_registry_is_shared(self):
        self.assertIs(get_default_registry(), get_default_registry())

if __name__ == '__main__':
    unittest.main()
