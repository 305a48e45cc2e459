#!/usr/bin/env python3
"""
Crawl a single page and print its accessibility evidence as JSON.

Usage:
    python -m scripts.crawl_url https://example.com [--output evidence.json] [--headful]
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from app.features.crawler.services.crawler_service import crawl_page
from app.features.crawler.services.session_manager import BrowserSessionManager
from app.platform.config import Settings
from app.platform.exceptions import NavigationError
from app.platform.utils.url_validator import validate_url


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract WCAG page signals from a URL")
    parser.add_argument("url", help="Absolute http(s) URL to inspect")
    parser.add_argument("--output", "-o", help="Write the JSON document to this file instead of stdout")
    parser.add_argument("--headful", action="store_true", help="Show the browser window")
    parser.add_argument("--timeout", type=int, default=None, help="Navigation timeout in seconds")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    is_valid, error = validate_url(args.url)
    if not is_valid:
        print(f"Invalid URL: {error}", file=sys.stderr)
        return 2

    overrides = {"BROWSER_HEADLESS": not args.headful}
    if args.timeout:
        overrides["NAVIGATION_TIMEOUT_SECONDS"] = args.timeout
    manager = BrowserSessionManager(Settings(**overrides))

    try:
        document = await crawl_page(args.url, manager)
    except NavigationError as e:
        print(f"Could not analyze {args.url}: {e}", file=sys.stderr)
        return 1

    payload = json.dumps(document.model_dump(mode="json"), indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
    else:
        print(payload)

    for warning in document.extraction_metadata.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return 0


def main(argv=None) -> int:
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
