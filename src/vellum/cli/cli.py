"""
Command-line interface for rendering archived chat exports.

Runs one full pass over the input root and reports elapsed time.
"""

import argparse
import logging
import sys
from typing import List, Optional

from ..config import Config
from ..errors import TemplateLoadError
from ..pipeline import Pipeline

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging with specified level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Render an archived chat export into static HTML pages.'
    )
    parser.add_argument(
        'input_dir',
        nargs='?',
        help='Directory holding one subdirectory per server (default: .)'
    )
    parser.add_argument(
        '-o', '--output-dir',
        help='Output directory for rendered pages (default: out)'
    )
    parser.add_argument(
        '--server-template',
        help='Template for server index pages (default: index.j2)'
    )
    parser.add_argument(
        '--channel-template',
        help='Template for channel pages (default: channel.j2)'
    )
    parser.add_argument(
        '-j', '--workers',
        type=int,
        help='Directory scanning threads (default: CPU count)'
    )
    parser.add_argument(
        '--no-minify',
        action='store_true',
        help='Write pages without HTML minification'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Set logging level'
    )
    return parser


def render_cli(argv: Optional[List[str]] = None) -> int:
    """Render every server under the input directory; returns an exit status."""
    args = build_parser().parse_args(argv)

    config = Config(
        input_dir=args.input_dir,
        output_dir=args.output_dir,
        server_template=args.server_template,
        channel_template=args.channel_template,
        workers=args.workers,
        minify=False if args.no_minify else None,
        log_level=args.log_level,
    )
    setup_logging(config.log_level)

    if not config.validate():
        missing = config.get_missing_config()
        logger.error(f"Missing required templates: {', '.join(missing)}")
        return 1

    try:
        pipeline = Pipeline(config)
    except TemplateLoadError as e:
        logger.error(f"Template loading failed: {e}")
        return 1

    try:
        report = pipeline.run()
    except OSError as e:
        logger.error(f"Cannot read input directory {config.input_dir}: {e}")
        return 1

    print(f"done in {report.elapsed:.3f}s using {report.workers} threads")
    for failure in report.failures:
        logger.error(f"Failed: {failure}")
    return 0 if report.ok else 1


def main() -> None:
    sys.exit(render_cli())


if __name__ == '__main__':
    main()
