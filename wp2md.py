#!/usr/bin/env python3
"""
WordPress Export to Markdown - Main CLI Entry Point

Converts a WordPress WXR export into Markdown files with YAML front-matter and
downloads the images each post uses.
"""

import argparse
import logging
import sys
from typing import List, Optional

import yaml

from config_loader import ConfigLoader
from extractors import UnknownAuthorError
from logger import log_config, log_section, setup_logging
from models import LayoutMode
from orchestrator import ExportOrchestrator, ExportReport
from readers import ExportReadError

__version__ = "1.0.0"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='wp2md',
        description="Convert a WordPress export file to Markdown files with front-matter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert export.xml into ./output, one folder per permalink
  wp2md

  # Year/month folders, date-prefixed file names
  wp2md --input blog.xml --folders yearmonth --prefixdate

  # Only posts with "python" in the title, skip image downloads
  wp2md --filter python --no-saveimages

  # Settings from a config file, verbose logging
  wp2md --config wp2md.yaml -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration YAML file'
    )

    parser.add_argument(
        '--input',
        type=str,
        help='Path to WordPress export file (default: export.xml)'
    )

    parser.add_argument(
        '--output',
        type=str,
        help='Path to output folder (default: output)'
    )

    parser.add_argument(
        '--filter',
        type=str,
        help='Only convert posts whose title contains this text (case-insensitive)'
    )

    parser.add_argument(
        '--folders',
        choices=[mode.value for mode in LayoutMode],
        help='Output folder layout (default: path)'
    )

    parser.add_argument(
        '--prefixdate',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Prefix post folders/files with the publish date (default: off)'
    )

    parser.add_argument(
        '--namedfiles',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Name files <slug>.md instead of index.md in folder layouts (default: off)'
    )

    parser.add_argument(
        '--saveimages',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Download images attached to posts (default: on)'
    )

    parser.add_argument(
        '--addcontentimages',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Also collect and localize images found in post bodies (default: on)'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def run_export(config: dict, logger: logging.Logger) -> int:
    """Run the export and print the report. Returns the process exit code."""
    orchestrator = ExportOrchestrator(config, logger=logger)

    try:
        report = orchestrator.run(wait=True)
    finally:
        if orchestrator.writer is not None:
            orchestrator.writer.close()

    print("\n" + ExportReport(logger).format_console_report(report))

    errors = report.get('summary', {}).get('total_errors', 0)
    if errors > 0:
        logger.warning(f"Export completed with {errors} errors")
        return 1

    logger.info("Export completed successfully")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        logger = setup_logging(verbosity=args.verbose)

        config = ConfigLoader.load(args.config) if args.config else {}
        config = ConfigLoader.with_defaults(config)
        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)

        # Reconfigure logging with the merged settings
        logger = setup_logging(
            verbosity=args.verbose,
            log_file=config['logging'].get('file'),
            level=config['logging'].get('level')
        )

        log_section("WordPress Export to Markdown")
        logger.info(f"Version: {__version__}")
        log_config(config)

        return run_export(config, logger)

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except (ExportReadError, UnknownAuthorError) as e:
        print(f"ERROR: Invalid export: {e}", file=sys.stderr)
        return 2
    except (ValueError, yaml.YAMLError) as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nExport interrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"ERROR: Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
