#!/usr/bin/env python3
"""
Tests for ConfigManager
"""

import unittest
import tempfile
import shutil
import os
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from config_manager import ConfigManager
from parsers.registry import ParserRegistry

class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager"""

    def setUp(self):
        # Create temporary directory for test config
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "nested" / "test_config.yaml"
        self.config_manager = ConfigManager(str(self.config_path))

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_create_default_config(self):
        """Test default config creation"""
        config = self.config_manager.load_config()

        self.assertTrue(self.config_path.exists())
        for key in ['fetch', 'extraction', 'output']:
            self.assertIn(key, config)
        self.assertEqual(config['fetch']['timeout'], 30)
        self.assertEqual(config['extraction']['role_pointer_key'], '_49')
        self.assertEqual(config['extraction']['role_fallback'], 'alternate')

    def test_get_nested_value(self):
        """Test nested value retrieval"""
        config = self.config_manager.load_config()

        self.assertEqual(self.config_manager.get_nested_value(config, 'extraction.role_lookback_window'), 50)
        self.assertEqual(self.config_manager.get_nested_value(config, 'fetch.missing', 'default'), 'default')
        self.assertEqual(self.config_manager.get_nested_value(config, 'fetch.timeout.deeper', 'x'), 'x')

    def test_update_config(self):
        """Test config updating"""
        self.config_manager.load_config()

        self.config_manager.update_config({
            'fetch': {'timeout': 10},
            'new_key': 'new_value',
        })

        updated_config = self.config_manager.load_config()
        self.assertEqual(updated_config['fetch']['timeout'], 10)
        self.assertEqual(updated_config['new_key'], 'new_value')
        # Sibling values survive a partial section update
        self.assertEqual(updated_config['fetch']['accept_language'], 'en-US,en;q=0.5')

    def test_partial_file_is_filled_from_defaults(self):
        self.config_path.parent.mkdir(parents=True)
        self.config_path.write_text("extraction:\n  role_fallback: neighbor\n", encoding='utf-8')

        config = self.config_manager.load_config()

        self.assertEqual(config['extraction']['role_fallback'], 'neighbor')
        self.assertEqual(config['extraction']['min_stream_payload_length'], 1000)
        self.assertEqual(config['output']['format'], 'json')

    def test_empty_section_keeps_defaults(self):
        self.config_path.parent.mkdir(parents=True)
        self.config_path.write_text("extraction:\noutput:\n  format: markdown\n", encoding='utf-8')

        config = self.config_manager.load_config()

        self.assertEqual(config['extraction']['role_fallback'], 'alternate')
        self.assertEqual(config['extraction']['role_lookback_window'], 50)
        self.assertEqual(config['output']['format'], 'markdown')

        registry = ParserRegistry(config=config)
        self.assertEqual(len(registry.get_parsers()), 3)

    def test_invalid_yaml_falls_back_to_defaults(self):
        self.config_path.parent.mkdir(parents=True)
        self.config_path.write_text("fetch: [unclosed\n", encoding='utf-8')

        config = self.config_manager.load_config()

        self.assertEqual(config['fetch']['timeout'], 30)

    def test_default_path(self):
        manager = ConfigManager()

        self.assertEqual(manager.config_path.name, 'config.yaml')
        self.assertEqual(manager.config_path.parent.name, 'chat_share_parser')

if __name__ == '__main__':
    unittest.main()
