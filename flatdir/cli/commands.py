"""Namespace CLI commands."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

from flatdir.config import ExplorerConfig
from flatdir.exceptions import NamespaceException
from flatdir.models.file import to_listing_vo
from flatdir.models.node import FileNode, Listing
from flatdir.models.report import BaseReport
from flatdir.server import app as server_app
from flatdir.services.clipboard import ClipboardRegister
from flatdir.services.namespace import NamespaceBuilder
from flatdir.services.preview import load_preview
from flatdir.services.transfer import TransferEngine, UploadItem
from flatdir.store.local import LocalObjectStore
from flatdir.utils import paths

_LOGGER = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


class Context:
    """Services wired to the configured local store."""

    def __init__(self, args: argparse.Namespace) -> None:
        config = ExplorerConfig.load(args.config_dir)
        if args.storage_dir:
            config.storage_dir = args.storage_dir
        self.store = LocalObjectStore(
            config.storage_path,
            url_signer=config.server.url_signer(),
            base_url=config.server.public_url(),
        )
        self.namespace = NamespaceBuilder(self.store, config.max_concurrency)
        self.transfer = TransferEngine(self.store, config.max_concurrency)


def format_listing(listing: Listing) -> str:
    lines = [f"{listing.path}:"]
    for folder in listing.folders:
        lines.append(f"  {'<dir>':>10}  {folder.name}/")
    for file in listing.files:
        modified = file.modified_at.strftime("%Y-%m-%d %H:%M")
        lines.append(f"  {file.size:>10}  {modified}  {file.name}")
    return "\n".join(lines)


def print_report(report: BaseReport) -> None:
    print(f"Status: {report.status.value}")
    for key in report.failed_keys:
        print(f"  failed: {key}")


async def async_ls(ctx: Context, args: argparse.Namespace) -> int:
    listing = (await ctx.namespace.list(args.path)).sorted()
    if args.json:
        print(to_listing_vo(listing).to_json())
    else:
        print(format_listing(listing))
    return 0


async def async_mkdir(ctx: Context, args: argparse.Namespace) -> int:
    prefix = paths.normalize(args.path)
    if not prefix:
        print("Error: cannot create the root folder", file=sys.stderr)
        return 1
    folder = await ctx.transfer.create_folder(
        paths.to_display(paths.parent_key(prefix)), paths.name_of(prefix)
    )
    print(f"Created {paths.to_display(folder.path)}")
    return 0


async def async_put(ctx: Context, args: argparse.Namespace) -> int:
    items = []
    for local_file in args.files:
        local_path = Path(local_file)
        data = await asyncio.to_thread(local_path.read_bytes)
        items.append(UploadItem(name=local_path.name, data=data))
    report = await ctx.transfer.upload_many(args.to, items)
    for outcome in report.keys:
        if outcome.success:
            print(f"Uploaded {paths.to_display(outcome.key)}")
    if not report.success:
        print_report(report)
        return 1
    return 0


async def async_rename(ctx: Context, args: argparse.Namespace) -> int:
    node = await ctx.namespace.stat(args.path)
    report = await ctx.transfer.rename(node, args.new_name)
    print_report(report)
    return 0 if report.success else 1


async def async_rm(ctx: Context, args: argparse.Namespace) -> int:
    nodes = [await ctx.namespace.stat(path) for path in args.paths]
    report = await ctx.transfer.delete_many(nodes)
    print_report(report)
    return 0 if report.success else 1


async def async_paste(ctx: Context, args: argparse.Namespace, cut: bool) -> int:
    node = await ctx.namespace.stat(args.source)
    clipboard = ClipboardRegister()
    if cut:
        clipboard.mark_for_cut(node)
    else:
        clipboard.mark_for_copy(node)
    new_key = await ctx.transfer.paste_from(clipboard, args.target)
    print(f"{'Moved' if cut else 'Copied'} to {paths.to_display(new_key or '')}")
    return 0


async def async_preview(ctx: Context, args: argparse.Namespace) -> int:
    node = await ctx.namespace.stat(args.path)
    if not isinstance(node, FileNode):
        print(f"Error: {args.path} is a folder", file=sys.stderr)
        return 1
    preview = await load_preview(node, max_bytes=args.max_bytes)
    print(f"Category: {preview.category.value}")
    if preview.url:
        print(f"URL: {preview.url}")
    if preview.text is not None:
        print(preview.text)
        if preview.truncated:
            print("... (truncated)")
    return 0


def _runner(
    func: Callable[[Context, argparse.Namespace], Awaitable[int]],
) -> Callable[[argparse.Namespace], None]:
    def run(args: argparse.Namespace) -> None:
        setup_logging(args.verbose)
        ctx = Context(args)
        try:
            code = asyncio.run(func(ctx, args))
        except NamespaceException as err:
            _LOGGER.debug("Command failed", exc_info=True)
            print(f"Error ({err.kind.value}): {err}", file=sys.stderr)
            code = 1
        sys.exit(code)

    return run


def _serve(args: argparse.Namespace) -> None:
    setup_logging(args.verbose)
    server_app.run(args)


def add_parser(subparsers: argparse._SubParsersAction) -> None:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config-dir", default="config", help="Directory holding config.yaml"
    )
    common.add_argument("--storage-dir", help="Override the storage directory")
    common.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    ls = subparsers.add_parser("ls", parents=[common], help="List a folder")
    ls.add_argument("path", nargs="?", default=paths.ROOT)
    ls.add_argument("--json", action="store_true", help="Print JSON")
    ls.set_defaults(func=_runner(async_ls))

    mkdir = subparsers.add_parser("mkdir", parents=[common], help="Create a folder")
    mkdir.add_argument("path")
    mkdir.set_defaults(func=_runner(async_mkdir))

    put = subparsers.add_parser("put", parents=[common], help="Upload local files")
    put.add_argument("files", nargs="+")
    put.add_argument("--to", default=paths.ROOT, help="Destination folder")
    put.set_defaults(func=_runner(async_put))

    rename = subparsers.add_parser(
        "rename", parents=[common], help="Rename a file or folder"
    )
    rename.add_argument("path")
    rename.add_argument("new_name")
    rename.set_defaults(func=_runner(async_rename))

    rm = subparsers.add_parser("rm", parents=[common], help="Delete files or folders")
    rm.add_argument("paths", nargs="+")
    rm.set_defaults(func=_runner(async_rm))

    cp = subparsers.add_parser("cp", parents=[common], help="Copy a file to a folder")
    cp.add_argument("source")
    cp.add_argument("target")
    cp.set_defaults(func=_runner(lambda ctx, args: async_paste(ctx, args, cut=False)))

    mv = subparsers.add_parser("mv", parents=[common], help="Move a file to a folder")
    mv.add_argument("source")
    mv.add_argument("target")
    mv.set_defaults(func=_runner(lambda ctx, args: async_paste(ctx, args, cut=True)))

    preview = subparsers.add_parser("preview", parents=[common], help="Preview a file")
    preview.add_argument("path")
    preview.add_argument("--max-bytes", type=int, default=4096)
    preview.set_defaults(func=_runner(async_preview))

    serve = subparsers.add_parser(
        "serve", parents=[common], help="Serve signed content URLs"
    )
    serve.set_defaults(func=_serve)
