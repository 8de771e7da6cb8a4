#!/usr/bin/env python3
"""
Tests for ClaudeParser
"""

import json
import unittest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from models import MessageRole, Platform
from parsers.claude_parser import ClaudeParser
from parsers.errors import NoMessagesFoundError

URL = "https://claude.ai/share/3f2b1c9e-1111-4c2d-9e7f-abcdef012345"

def next_data_page(data, title="Shared chat - Claude") -> str:
    return (f'<html><head><title>{title}</title></head><body>'
            f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(data)}</script>'
            '</body></html>')

class TestClaudeUrls(unittest.TestCase):
    """Test cases for Claude URL matching"""

    def test_can_parse(self):
        parser = ClaudeParser()

        self.assertTrue(parser.can_parse(URL))
        self.assertFalse(parser.can_parse("https://claude.ai/chat/3f2b1c9e"))
        self.assertFalse(parser.can_parse("https://chatgpt.com/share/abc123"))

class TestNextData(unittest.TestCase):
    """Test cases for the __NEXT_DATA__ strategy"""

    def setUp(self):
        self.parser = ClaudeParser()

    def test_shared_conversation(self):
        data = {"props": {"pageProps": {"sharedConversation": {
            "name": "Test",
            "chat_messages": [{"uuid": "a1", "sender": "human", "text": "hi"}],
        }}}}

        result = self.parser.parse_html(next_data_page(data), URL)

        self.assertEqual(result.title, "Test")
        self.assertEqual(result.platform, Platform.CLAUDE)
        self.assertEqual(result.method, "next_data")
        self.assertEqual([m.to_dict() for m in result.messages],
                         [{"id": "a1", "role": "user", "content": "hi", "html": ""}])

    def test_conversation_path_and_content_blocks(self):
        data = {"props": {"pageProps": {"conversation": {
            "chat_messages": [
                {"sender": "human", "text": "Summarize this recipe"},
                {"uuid": "b2", "sender": "assistant", "text": "ignored",
                 "content": [
                     {"type": "text", "text": "Mix the dough."},
                     {"type": "tool_use", "name": "search"},
                     {"type": "text", "text": "Bake for 40 minutes."},
                 ]},
                {"uuid": "b3", "sender": "system", "text": "internal note"},
            ],
        }}}}

        result = self.parser.parse_html(next_data_page(data), URL)

        self.assertEqual(result.title, "Claude Conversation")
        self.assertEqual([(m.id, m.role, m.content) for m in result.messages], [
            ("claude-msg-0", MessageRole.USER, "Summarize this recipe"),
            ("b2", MessageRole.ASSISTANT, "Mix the dough.\nBake for 40 minutes."),
        ])

    def test_empty_conversation_raises(self):
        data = {"props": {"pageProps": {"sharedConversation": {"name": "Empty", "chat_messages": []}}}}

        with self.assertRaises(NoMessagesFoundError):
            self.parser.parse_html(next_data_page(data), URL)

    def test_empty_conversation_ignores_page_chrome(self):
        data = {"props": {"pageProps": {"sharedConversation": {"name": "Empty", "chat_messages": []}}}}
        html = next_data_page(data).replace(
            '</body>', '<div class="message-composer">Reply to Claude...</div></body>')

        with self.assertRaises(NoMessagesFoundError):
            self.parser.parse_html(html, URL)

class TestEmbeddedData(unittest.TestCase):
    """Test cases for the window.__CLAUDE_DATA__ strategy"""

    def test_embedded_assignment(self):
        data = {"chat": {"title": "Rye bread", "messages": [
            {"id": "m1", "role": "user", "content": "How long should rye proof?"},
            {"id": "m2", "sender": "assistant", "text": "About two hours; watch for cracks {sic}."},
            {"id": "m3", "role": "tool", "content": "skipped"},
        ]}}
        html = (f'<html><body><script>window.__CLAUDE_DATA__ = {json.dumps(data)};'
                'window.ready = true;</script></body></html>')

        result = ClaudeParser().parse_html(html, URL)

        self.assertEqual(result.method, "embedded_data")
        self.assertEqual(result.title, "Rye bread")
        self.assertEqual([(m.id, m.role) for m in result.messages],
                         [("m1", MessageRole.USER), ("m2", MessageRole.ASSISTANT)])
        self.assertEqual(result.messages[1].content, "About two hours; watch for cracks {sic}.")

    def test_empty_embedded_conversation_raises(self):
        data = {"conversation": {"name": "Nothing yet", "messages": []}}
        html = (f'<html><body><script>window.__CLAUDE_DATA__ = {json.dumps(data)};</script>'
                '<div class="conversation-message">Start a new chat</div></body></html>')

        with self.assertRaises(NoMessagesFoundError):
            ClaudeParser().parse_html(html, URL)

    def test_numeric_ids_become_strings(self):
        data = {"chat": {"messages": [{"id": 17, "role": "user", "content": "Why does dough rise?"}]}}
        html = f'<html><body><script>window.__CLAUDE_DATA__ = {json.dumps(data)};</script></body></html>'

        result = ClaudeParser().parse_html(html, URL)

        self.assertEqual(result.messages[0].id, "17")

class TestDomFallback(unittest.TestCase):
    """Test cases for the rendered-markup strategy"""

    def test_role_hints_and_title(self):
        html = """
        <html><head><title>Weekend baking - Claude</title></head><body>
          <div data-testid="message" data-sender="human"><p>Can I freeze dough?</p></div>
          <div data-testid="message" class="font-claude-message"><p>Yes, <b>for a month</b>.</p></div>
        </body></html>
        """

        result = ClaudeParser().parse_html(html, URL)

        self.assertEqual(result.method, "dom")
        self.assertEqual(result.title, "Weekend baking")
        self.assertEqual([(m.id, m.role, m.content) for m in result.messages], [
            ("claude-html-msg-0", MessageRole.USER, "Can I freeze dough?"),
            ("claude-html-msg-1", MessageRole.ASSISTANT, "Yes, for a month."),
        ])
        self.assertEqual(result.messages[1].html, "<p>Yes, <b>for a month</b>.</p>")

    def test_positional_alternation(self):
        html = """
        <html><body>
          <div class="conversation-message">First question here</div>
          <div class="conversation-message">First answer here</div>
          <div class="conversation-message">Second question here</div>
        </body></html>
        """

        result = ClaudeParser().parse_html(html, URL)

        self.assertEqual([m.role for m in result.messages],
                         [MessageRole.USER, MessageRole.ASSISTANT, MessageRole.USER])

    def test_nested_matches_are_not_duplicated(self):
        html = """
        <html><body>
          <div class="message-row"><span class="message-text">Only once please</span></div>
        </body></html>
        """

        result = ClaudeParser().parse_html(html, URL)

        self.assertEqual([m.content for m in result.messages], ["Only once please"])

    def test_nothing_found(self):
        with self.assertRaises(NoMessagesFoundError) as ctx:
            ClaudeParser().parse_html("<html><body><p>Sign in</p></body></html>", URL)

        self.assertEqual(str(ctx.exception),
                         "No messages found in Claude conversation. The page format may have changed.")

if __name__ == '__main__':
    unittest.main()
