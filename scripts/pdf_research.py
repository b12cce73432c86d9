#!/usr/bin/env python3
"""
Search for PDFs on a topic, process them and print the result as JSON.

Usage (from project root):
    python scripts/pdf_research.py research "graph neural networks" --depth shallow
    python scripts/pdf_research.py research "malaria vaccines" -s pubmed --include-ocr
    python scripts/pdf_research.py discover "kubernetes networking" -s technical -n 20
    python scripts/pdf_research.py discover "climate policy" --start 2020-01-01 --end 2022-12-31
    python scripts/pdf_research.py ocr-status

Logs are written to $PDF_LOG_DIR (default logs/).
"""

import argparse
import asyncio
import json
import logging
import re
import sys
from datetime import date
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import configure_logging  # noqa: E402
from core.documents import DateRange  # noqa: E402
from core.ocr import OCRManager  # noqa: E402
from core.utils import cleanup_all_clients  # noqa: E402
from workflows.pdf_research import discover_pdfs, research_pdfs  # noqa: E402

logger = logging.getLogger(__name__)


def _run_name(command: str, query: str | None) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (query or "").lower()).strip("-")[:40]
    return f"{command}-{slug}" if slug else command


def _date_range(args: argparse.Namespace) -> DateRange | None:
    if not args.start and not args.end:
        return None
    return DateRange(start=args.start, end=args.end)


async def run_command(args: argparse.Namespace) -> str:
    try:
        if args.command == "discover":
            result = await discover_pdfs(
                args.query,
                max_results=args.max,
                sources=args.sources,
                date_range=_date_range(args),
            )
            return result.model_dump_json(by_alias=True, indent=2)

        if args.command == "research":
            result = await research_pdfs(
                args.query,
                max_documents=args.max,
                sources=args.sources,
                date_range=_date_range(args),
                include_ocr=args.include_ocr,
                force_ocr=args.force_ocr,
                analysis_depth=args.depth,
            )
            return result.model_dump_json(by_alias=True, indent=2)

        manager = OCRManager()
        try:
            return json.dumps(await manager.engine_status(), indent=2)
        finally:
            await manager.close()
    finally:
        await cleanup_all_clients()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PDF discovery, processing and OCR",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    def add_search_args(sub: argparse.ArgumentParser, default_max: int) -> None:
        sub.add_argument("query", help="Search query")
        sub.add_argument(
            "-n", "--max", type=int, default=default_max,
            help=f"Maximum documents to return (default: {default_max})",
        )
        sub.add_argument(
            "-s", "--sources", nargs="+", default=["all"],
            help="Sources: arxiv pubmed ieee scholar researchgate ssrn government "
                 "technical web universal, or all (default)",
        )
        sub.add_argument("--start", type=date.fromisoformat, help="Earliest date (YYYY-MM-DD)")
        sub.add_argument("--end", type=date.fromisoformat, help="Latest date (YYYY-MM-DD)")

    discover = commands.add_parser("discover", help="Find PDFs without processing them")
    add_search_args(discover, default_max=20)

    research = commands.add_parser("research", help="Find, process and summarize PDFs")
    add_search_args(research, default_max=10)
    research.add_argument(
        "--depth", choices=["shallow", "medium", "deep"], default="medium",
        help="Documents processed: 3, 5 or 10 (default: medium)",
    )
    research.add_argument("--include-ocr", action="store_true", help="OCR poor-quality text")
    research.add_argument("--force-ocr", action="store_true", help="OCR every document")

    commands.add_parser("ocr-status", help="Report OCR engine availability")
    return parser


def main():
    args = build_parser().parse_args()
    configure_logging(
        _run_name(args.command, getattr(args, "query", None)),
        level=logging.DEBUG if args.verbose else None,
    )

    try:
        output = asyncio.run(run_command(args))
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    print(output)


if __name__ == "__main__":
    main()
