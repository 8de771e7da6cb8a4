#!/usr/bin/env python3
"""
Tests for ContentClassifier
"""

import unittest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from parsers.content_classifier import ContentClassifier, METADATA_KEYWORDS

class TestValidMessageContent(unittest.TestCase):
    """Test cases for is_valid_message_content"""

    def test_rejects_every_metadata_keyword(self):
        for keyword in METADATA_KEYWORDS:
            with self.subTest(keyword=keyword):
                self.assertFalse(ContentClassifier.is_valid_message_content(keyword))

    def test_rejects_keywords_case_insensitively(self):
        self.assertFalse(ContentClassifier.is_valid_message_content("USER"))
        self.assertFalse(ContentClassifier.is_valid_message_content("ServerResponse"))

    def test_rejects_non_strings(self):
        for value in [None, 42, 3.5, True, ["Hello there"], {"text": "Hello there"}]:
            with self.subTest(value=value):
                self.assertFalse(ContentClassifier.is_valid_message_content(value))

    def test_rejects_structural_values(self):
        rejected = [
            "a",
            "",
            "550e8400-e29b-41d4-a716-446655440000",
            "12345",
            "3.14",
            "gpt-4o",
            "abc123",
            "example.com",
            "example.com, openai.org",
            "_internal value",
            "$ref pointer",
        ]
        for value in rejected:
            with self.subTest(value=value):
                self.assertFalse(ContentClassifier.is_valid_message_content(value))

    def test_rejects_strings_without_content_signal(self):
        self.assertFalse(ContentClassifier.is_valid_message_content("Supercalifragilistic"))
        self.assertFalse(ContentClassifier.is_valid_message_content("camelCaseIdentifier"))

    def test_accepts_prose(self):
        self.assertTrue(ContentClassifier.is_valid_message_content("Hello, how are you?"))
        self.assertTrue(ContentClassifier.is_valid_message_content("First line\nSecond line"))

    def test_accepts_non_latin_text_without_spaces(self):
        self.assertTrue(ContentClassifier.is_valid_message_content("안녕하세요"))
        self.assertTrue(ContentClassifier.is_valid_message_content("Привет"))

    def test_accepts_code_punctuation(self):
        self.assertTrue(ContentClassifier.is_valid_message_content("f(x)=y"))

class TestStandaloneCode(unittest.TestCase):
    """Test cases for looks_like_standalone_code"""

    def test_strong_first_line(self):
        self.assertTrue(ContentClassifier.looks_like_standalone_code("import os\nprint(os.getcwd())"))
        self.assertTrue(ContentClassifier.looks_like_standalone_code("def add(a, b):\n    return a + b"))

    def test_mostly_code_lines(self):
        snippet = "total = 0\nfor item in items:\n    total = total + item\nprint(total)"
        self.assertTrue(ContentClassifier.looks_like_standalone_code(snippet))

    def test_short_assignment(self):
        self.assertTrue(ContentClassifier.looks_like_standalone_code("result = compute(3, 4)"))

    def test_numeric_expression(self):
        self.assertTrue(ContentClassifier.looks_like_standalone_code("(3 + 4) * 2"))

    def test_prose_is_not_code(self):
        prose = ("Sourdough needs an active starter before you begin.\n"
                 "Mix the flour and water, then let the dough rest for an hour.")
        self.assertFalse(ContentClassifier.looks_like_standalone_code(prose))

    def test_markdown_list_is_not_code(self):
        answer = "Here are the steps:\n- Feed the starter\n- Mix the dough\n- Bake it hot"
        self.assertFalse(ContentClassifier.looks_like_standalone_code(answer))

if __name__ == '__main__':
    unittest.main()
