"""Command line entry point: upload a Markdown file's images and rewrite its links."""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from one_picgo import __version__
from one_picgo.config import load_config
from one_picgo.core.models import ConfigError
from one_picgo.core.processor import UploadProcessor
from one_picgo.core.upload import UploadAttemptExecutor
from one_picgo.host import FileDocumentHost
from one_picgo.transforms.images import empty_alt, keep_alt
from one_picgo.uploaders.picgo import PicGoServerUploader

logger = logging.getLogger("one_picgo")

MARKDOWN_SUFFIXES = {'.md', '.markdown', '.mdown', '.mkd'}


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="one-picgo",
        description="Upload local images of a Markdown file through PicGo and replace their links",
    )
    parser.add_argument("input", type=Path, help="Markdown file to process")
    parser.add_argument("-c", "--config", type=Path, help="YAML config file")
    parser.add_argument("--interval", type=int, dest="upload_interval",
                        help="Pause between uploads and retries in milliseconds")
    parser.add_argument("--retries", type=int, dest="max_retries",
                        help="Attempts per image before giving up")
    parser.add_argument("--picgo-url", dest="picgo_url", help="PicGo server upload endpoint")
    parser.add_argument("--keep-alt", dest="keep_alt_text", action="store_const", const=True,
                        help="Keep alt text in rewritten links")
    parser.add_argument("--no-staging", dest="use_staging", action="store_const", const=False,
                        help="Upload original files instead of renamed copies")
    parser.add_argument("--dry-run", action="store_true", help="Upload but do not write the file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--log-file", type=Path, help="Write diagnostics to this file")
    parser.add_argument("-V", "--version", action="version", version=f"one-picgo {__version__}")
    return parser


def _setup_logging(verbose: bool, log_file=None) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        filename=str(log_file) if log_file else None,
    )


def run(args) -> int:
    """Run one upload session for the parsed arguments."""
    path = args.input
    if not path.is_file():
        print(f"error: no such file: {path}", file=sys.stderr)
        return 2
    if path.suffix.lower() not in MARKDOWN_SUFFIXES:
        print(f"error: not a Markdown file: {path}", file=sys.stderr)
        return 2

    try:
        config = load_config(args.config)
        overrides = {
            name: getattr(args, name)
            for name in ('upload_interval', 'max_retries', 'picgo_url', 'keep_alt_text', 'use_staging')
            if getattr(args, name) is not None
        }
        config = replace(config, **overrides)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    uploader = PicGoServerUploader(url=config.picgo_url, timeout=config.timeout)
    executor = UploadAttemptExecutor(
        uploader,
        staging_dir=config.staging_dir,
        use_staging=config.use_staging,
    )
    processor = UploadProcessor(
        executor,
        upload_interval=config.upload_interval,
        max_retries=config.max_retries,
        replacement_transform=keep_alt() if config.keep_alt_text else empty_alt(),
    )

    host = FileDocumentHost(path, dry_run=args.dry_run)
    session = processor.run(host)
    return 1 if session.failed_count else 0


def main(argv=None):
    args = _build_parser().parse_args(argv)
    _setup_logging(args.verbose, args.log_file)
    try:
        return run(args)
    except Exception:
        logger.exception("Unexpected error while processing %s", args.input)
        print("error: unexpected error, see log for details", file=sys.stderr)
        return 1
