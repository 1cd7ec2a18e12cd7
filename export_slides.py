#!/usr/bin/env python3
"""
Marp Slides Export Tool - Main CLI Entry Point

Resolves the images referenced by markdown slide documents, stages them with
the document and runs the Marp CLI to produce PDF, PPTX, HTML or PNG output.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List

from config_loader import ConfigLoader, get_nested
from content_store import ContentReadError, LocalContentStore
from logger import ProgressTracker, log_config, log_section, setup_logging
from models import ExportResult, ExportTarget
from orchestrator import ExportOrchestrator, MarpCLIError, StagingError
from renderers import SlidePreview

__version__ = "1.0.0"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Export markdown slide decks with the Marp CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export a deck to PDF
  python export_slides.py --config config.yaml Talks/intro.md

  # Export several decks to PPTX
  python export_slides.py --target presentation-package Talks/a.md Talks/b.md

  # Write a standalone preview page
  python export_slides.py --preview-html preview.html Talks/intro.md

  # Verbose logging
  python export_slides.py -vv Talks/intro.md
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        'documents',
        nargs='+',
        help='Document paths relative to the content root'
    )

    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Path to configuration YAML file (default: config.yaml)'
    )

    parser.add_argument(
        '--target',
        choices=[t.value for t in ExportTarget] + ['png', 'pdf', 'html', 'pptx', 'preview'],
        help='Export target (default: export.target from config)'
    )

    parser.add_argument('--content-root', type=str, help='Content root directory')
    parser.add_argument('--attachment-folder', type=str, help='Default attachment folder')
    parser.add_argument('--export-path', type=str, help='Prefix for exported files')
    parser.add_argument('--chrome-path', type=str, help='Browser executable used by Marp')
    parser.add_argument('--marp-executable', type=str, help='Marp CLI executable')
    parser.add_argument('--log-file', type=str, help='Write logs to this file')

    parser.add_argument(
        '--preview-html',
        type=str,
        help='Render an in-process preview page to this file instead of exporting'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


async def export_documents(config: dict, documents: List[str], logger: logging.Logger) -> List[ExportResult]:
    """Export each document in turn with the configured target."""
    store = LocalContentStore(get_nested(config, 'vault.content_root'))
    orchestrator = ExportOrchestrator(config, store, logger=logger)
    target = ExportTarget.parse(get_nested(config, 'export.target'))

    results = []
    with ProgressTracker(total_items=len(documents), item_type='documents') as tracker:
        for document in documents:
            try:
                result = await orchestrator.export(document, target)
            except (ContentReadError, StagingError) as e:
                logger.error(f"Export of '{document}' failed: {e}")
                tracker.increment(success=False)
                continue
            results.append(result)
            tracker.increment(success=result.succeeded)
            if not result.succeeded:
                logger.warning(f"Export of '{document}' failed: {result.error_message}")
    return results


def write_preview(config: dict, document: str, output: str, logger: logging.Logger) -> int:
    """Render one document's preview page to ``output``."""
    store = LocalContentStore(get_nested(config, 'vault.content_root'))
    preview = SlidePreview(config, store, logger=logger)
    preview.load_themes()

    page = preview.render_path(document)
    if page is None:
        return 1

    Path(output).write_text(page, encoding='utf-8')
    logger.info(f"Preview written to {output}")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        logger = setup_logging(verbosity=args.verbose)

        log_section("Marp Slides Export Tool")
        logger.info(f"Version: {__version__}")

        if Path(args.config).exists():
            logger.info(f"Loading configuration from {args.config}")
            config = ConfigLoader.load(args.config)
        else:
            logger.info(f"No configuration file at {args.config}, using defaults")
            config = ConfigLoader.with_defaults({})

        # CLI takes precedence
        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)

        logger = setup_logging(
            verbosity=args.verbose,
            log_file=get_nested(config, 'logging.file'),
            level=get_nested(config, 'logging.level')
        )
        log_config(config)

        if args.preview_html:
            return write_preview(config, args.documents[0], args.preview_html, logger)

        results = asyncio.run(export_documents(config, args.documents, logger))

        failed = len(args.documents) - sum(1 for r in results if r.succeeded)
        if failed > 0:
            logger.warning(f"Export completed with {failed} failure(s)")
            return 1

        logger.info("Export completed successfully")
        return 0

    except MarpCLIError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except ContentReadError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nExport interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
