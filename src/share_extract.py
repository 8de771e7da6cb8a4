#!/usr/bin/env python3
"""
Chat Share Parser CLI
Extract a shared ChatGPT, Claude or Gemini conversation as JSON or Markdown.
"""

import argparse
import sys
from pathlib import Path
import logging

from config_manager import ConfigManager
from output_formatter import ConversationFormatter
from parsers.errors import ParseError, UnsupportedPlatformError, user_message
from parsers.registry import ParserRegistry

VERSION = "0.1.0"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_UNSUPPORTED = 2

def setup_logging(verbose: bool = False):
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract shared AI chat conversations as JSON or Markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  share-extract https://chatgpt.com/share/abc-123
  share-extract https://claude.ai/share/abc-123 --format markdown -o chat.md
  share-extract --list-platforms
        """
    )

    parser.add_argument(
        "url",
        nargs="?",
        help="Public share URL to extract from"
    )

    parser.add_argument(
        "--config", "-c",
        help="Configuration file path (default: ~/.config/chat_share_parser/config.yaml)"
    )

    parser.add_argument(
        "--format", "-f",
        choices=list(ConversationFormatter.SUPPORTED_FORMATS),
        help="Output format (default: from config)"
    )

    parser.add_argument(
        "--output", "-o",
        help="Write output to this file instead of stdout"
    )

    parser.add_argument(
        "--list-platforms",
        action="store_true",
        help="List supported platforms and share URL formats"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Chat Share Parser v{VERSION}"
    )

    return parser

def main(argv=None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = ConfigManager(args.config).load_config()
        registry = ParserRegistry(config=config)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_FAILURE

    if args.list_platforms:
        for registered in registry.get_parsers():
            patterns = ', '.join(registered.get_supported_patterns())
            print(f"{registered.platform.value}: {patterns}")
        return EXIT_OK

    if not args.url:
        parser.error("a share URL is required unless --list-platforms is given")

    try:
        logger.info(f"Extracting conversation from {args.url}...")
        result = registry.parse(args.url)

    except UnsupportedPlatformError as e:
        logger.error(user_message(e, registry.get_supported_patterns()))
        return EXIT_UNSUPPORTED
    except ParseError as e:
        logger.error(user_message(e, registry.get_supported_patterns()))
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return EXIT_FAILURE

    logger.info(f"Extracted {len(result.messages)} messages from {result.platform.value} ({result.method})")

    formatter = ConversationFormatter(config)
    output = formatter.format_result(result, args.format)

    if args.output:
        output_path = Path(args.output).expanduser()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(output, encoding='utf-8')
        logger.info(f"Saved conversation to {output_path}")
    else:
        print(output)

    return EXIT_OK

if __name__ == "__main__":
    sys.exit(main())
