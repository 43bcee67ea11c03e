"""
Command-line interface for Wiki Mirror
"""

import argparse
import logging
import sys
from .config import load_config
from .errors import ConfigurationError
from .scraper import WikiMirror

DEFAULT_ROOT = "Home"


def setup_logging(verbose: bool):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def validate_positive_float(value):
    """Validate that a value is a positive float."""
    try:
        fvalue = float(value)
        if fvalue <= 0:
            raise argparse.ArgumentTypeError(f"{value} must be a positive number")
        return fvalue
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value} is not a valid number")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Mirror a wiki page tree and its attached files to disk. "
        "Reads CBT_HOST, API_TOKEN and OUTPUT_DIR from the environment or a .env file."
    )
    parser.add_argument(
        "--root",
        default=DEFAULT_ROOT,
        help=f"Title of the page to start from (default: {DEFAULT_ROOT})",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output directory (default: OUTPUT_DIR, or out/ in the package directory)",
    )
    parser.add_argument(
        "--timeout",
        type=validate_positive_float,
        default=None,
        help="Request timeout in seconds (default: no timeout)",
    )
    parser.add_argument(
        "--markdown",
        action="store_true",
        help="Also save each page's content as index.md",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output_dir = args.output or config.output_dir
    mirror = WikiMirror(
        host=config.host,
        token=config.token,
        timeout=args.timeout,
        save_markdown=args.markdown,
    )

    try:
        tree = mirror.mirror(args.root, output_dir)
        if tree is None:
            print(f"Page '{args.root}' could not be fetched. Nothing was mirrored.", file=sys.stderr)
        else:
            print(f"Done. Mirrored {tree.count()} pages to {output_dir}")
        return 0

    except KeyboardInterrupt:
        print("Interrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
