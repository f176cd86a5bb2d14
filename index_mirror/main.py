#!/usr/bin/env python3
"""
Index Mirror - mirror the useful part of an HTML directory index.

This tool crawls an Apache/SVN style autoindex, keeps only the allow-listed
directories and files, and recreates them under a local directory.

Usage:
    python main.py --release 6.9 --output ./vendor/wpcore
    python main.py --url https://example.org/tags/1.0 --output ./out \\
        --allow-dir src --suffix .py --keep-name LICENSE

Features:
    - Crawls nested index listings with cycle protection
    - Filters the tree by directory allow-list and file suffix/name
    - Downloads files in parallel with a bounded number of requests
    - Resolves the release from a composer.json manifest
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional
from urllib.parse import urlparse

from index_mirror import __version__
from index_mirror.crawler import FilterPolicy, MirrorPipeline
from index_mirror.manifest import is_installed, read_manifest_version, release_url
from index_mirror.utils.constants import (
    DEFAULT_ALLOWED_DIRS,
    DEFAULT_CONCURRENCY,
    DEFAULT_FILE_NAMES,
    DEFAULT_FILE_SUFFIXES,
    DEFAULT_INDEX_BASE,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)
from index_mirror.utils.errors import MirrorError, MirrorWriteError
from index_mirror.utils.log import (
    console,
    setup_logger,
    print_status,
    print_success,
    print_error,
    print_info,
    print_warning,
    render_tree,
)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='index-mirror',
        description='Mirror selected directories and files of an HTML directory index',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --release 6.9 --output ./vendor/wpcore
    %(prog)s --manifest composer.json --output ./vendor/wpcore --dry-run
    %(prog)s --url https://example.org/tags/1.0 -o ./out --allow-dir src --suffix .py
        """
    )

    # Source selection
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        '--url', '-u',
        type=str,
        help='Root listing URL to mirror'
    )

    source.add_argument(
        '--release', '-r',
        type=str,
        help='Release version to mirror from the index base'
    )

    parser.add_argument(
        '--manifest',
        type=str,
        default='composer.json',
        help='Manifest read for the release version when neither --url nor --release is given '
             '(default: composer.json)'
    )

    parser.add_argument(
        '--index-base',
        type=str,
        default=DEFAULT_INDEX_BASE,
        help=f'Index URL release tags live under (default: {DEFAULT_INDEX_BASE})'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default='./vendor/wpcore',
        help='Output directory for the mirror (default: ./vendor/wpcore)'
    )

    # Filter policy
    parser.add_argument(
        '--allow-dir',
        action='append',
        metavar='NAME',
        help=f'Directory name to keep; repeatable (default: {", ".join(DEFAULT_ALLOWED_DIRS)})'
    )

    parser.add_argument(
        '--suffix',
        action='append',
        metavar='SUFFIX',
        help=f'Keep files ending with SUFFIX; repeatable (default: {", ".join(DEFAULT_FILE_SUFFIXES)})'
    )

    parser.add_argument(
        '--keep-name',
        action='append',
        metavar='NAME',
        help=f'Keep files named exactly NAME; repeatable (default: {", ".join(DEFAULT_FILE_NAMES)})'
    )

    parser.add_argument(
        '--nested-dirs',
        action='store_true',
        help='Apply the directory allow-list to top-level directories only'
    )

    # Network
    parser.add_argument(
        '--timeout',
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f'Per-request timeout in seconds (default: {DEFAULT_TIMEOUT})'
    )

    parser.add_argument(
        '--concurrency', '-c',
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=f'Maximum concurrent requests (default: {DEFAULT_CONCURRENCY})'
    )

    parser.add_argument(
        '--depth', '-d',
        type=int,
        default=None,
        help='Maximum directory depth to crawl (default: unlimited)'
    )

    parser.add_argument(
        '--user-agent',
        type=str,
        default=DEFAULT_USER_AGENT,
        help=f'User agent for requests (default: {DEFAULT_USER_AGENT})'
    )

    # Behaviour
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Crawl and filter only; print the tree that would be mirrored'
    )

    parser.add_argument(
        '--tree-json',
        type=str,
        metavar='PATH',
        help='Write the filtered tree as JSON to PATH'
    )

    parser.add_argument(
        '--force', '-f',
        action='store_true',
        help='Mirror even if the output directory is already populated'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def validate_url(url: str) -> str:
    """
    Validate the root listing URL.

    Args:
        url: URL string to validate

    Returns:
        URL string, with https:// added when no scheme was given

    Raises:
        ValueError: If URL is invalid
    """
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    parsed = urlparse(url)

    if not parsed.netloc:
        raise ValueError(f"Invalid URL: {url}")

    return url


def resolve_root_url(args: argparse.Namespace) -> str:
    """
    Work out the root listing URL from the arguments.

    Args:
        args: Parsed arguments

    Returns:
        Root listing URL
    """
    if args.url:
        return validate_url(args.url)

    release = args.release or read_manifest_version(args.manifest)
    return validate_url(release_url(release, args.index_base))


def build_policy(args: argparse.Namespace) -> FilterPolicy:
    """
    Build the filter policy from the arguments, falling back to the defaults per list.

    Args:
        args: Parsed arguments

    Returns:
        FilterPolicy
    """
    return FilterPolicy.create(
        allowed_dirs=args.allow_dir or DEFAULT_ALLOWED_DIRS,
        file_suffixes=args.suffix or DEFAULT_FILE_SUFFIXES,
        file_names=args.keep_name or DEFAULT_FILE_NAMES,
        nested_dirs=args.nested_dirs,
    )


def print_banner() -> None:
    """Print the application banner."""
    banner = f"""
╔═══════════════════════════════════════════════════════════════╗
║                      INDEX MIRROR v{__version__:<27}║
║          Mirror selected parts of a directory index           ║
╚═══════════════════════════════════════════════════════════════╝
    """
    print_status(banner, "bold cyan")


def print_summary(result) -> None:
    """
    Print the mirror summary.

    Args:
        result: PipelineResult object
    """
    crawled_dirs, crawled_files = result.crawled_counts
    kept_dirs, kept_files = result.kept_counts

    print("\n" + "=" * 60)
    print_success("MIRROR SUMMARY")
    print("=" * 60)
    print(f"  Listings fetched:  {result.listings_fetched}")
    print(f"  Crawled:           {crawled_dirs} directories, {crawled_files} files")
    print(f"  Kept:              {kept_dirs} directories, {kept_files} files")
    if result.mirror:
        print(f"  Files written:     {result.mirror.files_written}")
        print(f"  Bytes written:     {result.mirror.bytes_written}")
    print(f"  Duration:          {result.duration_seconds:.1f} seconds")
    print("=" * 60 + "\n")


def write_tree_json(tree, path: str) -> None:
    """Write a tree as indented JSON."""
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(tree.to_dict(), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise MirrorWriteError(path, e.strerror or str(e)) from e


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the index mirror.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level, log_file=args.log_file)

    if not args.quiet:
        print_banner()

    try:
        if args.concurrency < 1:
            raise ValueError("--concurrency must be at least 1")
        if args.timeout <= 0:
            raise ValueError("--timeout must be positive")
        if args.depth is not None and args.depth < 0:
            raise ValueError("--depth must not be negative")

        root_url = resolve_root_url(args)
        policy = build_policy(args)

        if not args.dry_run and not args.force and is_installed(args.output):
            print_warning(f"{os.path.abspath(args.output)} is already populated (use --force to mirror again)")
            return 0

        if not args.quiet:
            print_info(f"Index: {root_url}")
            print_info(f"Output: {os.path.abspath(args.output)}")
            print_info(f"Directories: {', '.join(policy.allowed_dirs)}")
            print_info(f"Files: {', '.join(policy.file_suffixes + policy.file_names)}")

        pipeline = MirrorPipeline(
            root_url=root_url,
            output_dir=args.output,
            policy=policy,
            timeout=args.timeout,
            concurrency=args.concurrency,
            user_agent=args.user_agent,
            max_depth=args.depth,
            show_progress=not args.quiet
        )

        result = await pipeline.run(dry_run=args.dry_run)

        if args.tree_json:
            write_tree_json(result.kept, args.tree_json)
            if not args.quiet:
                print_info(f"Tree written to: {args.tree_json}")

        if args.dry_run and not args.quiet:
            console.print(render_tree(result.kept, label=root_url))

        if not args.quiet:
            print_summary(result)

        if not args.dry_run:
            print_success(f"Index mirrored to: {result.mirror.output_dir}")

        return 0

    except KeyboardInterrupt:
        print_error("\nMirror interrupted by user")
        return 1
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return 1
    except MirrorError as e:
        print_error(f"Error: {e}")
        if args.verbose:
            console.print_exception()
        return 1


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
