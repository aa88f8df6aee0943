"""Command-line interface for clustersmith.

Separate invocations over the same install directory share persisted asset
state, so ``create manifests`` followed by ``create cluster`` renders the
manifests once and reuses them.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from clustersmith.core.assets.files import FileFetcher
from clustersmith.core.config import InstallerConfig, load_config, load_installer_config
from clustersmith.core.engine import AssetSession, ResolutionContext, build_target, find_target
from clustersmith.core.errors import AssetError
from clustersmith.core.installer import TARGETS, default_registry
from clustersmith.core.io import AbsolutePath, FileSystem, RealFileSystem, absolute_path
from clustersmith.core.state import FSStateStore, NullStateStore, StateStore
from clustersmith.core.utils.logging import configure_from_config

console = Console()
logger = logging.getLogger(__name__)


def _error(message: str) -> None:
    # Messages carry field paths like [0] that rich would read as markup
    console.print(f"[red]ERROR: {escape(message)}[/red]", soft_wrap=True)


def _state_store(fs: FileSystem, install_dir: AbsolutePath, config: InstallerConfig) -> StateStore:
    if not config.state.enabled:
        return NullStateStore()
    return FSStateStore(fs, fs.join(install_dir, config.state.dir_name))


async def create_async(
    target_name: str,
    install_dir: Path,
    install_config_path: Path | None,
    config: InstallerConfig,
) -> int:
    """Resolve a target and write its files into the install directory.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    target = find_target(TARGETS, target_name)
    fs = RealFileSystem()
    directory = absolute_path(install_dir)
    try:
        await fs.mkdirs(directory, exist_ok=True)
    except OSError as e:
        _error(f"Could not create install directory: {e}")
        return 1

    context = ResolutionContext(config=config, output_dir=directory)
    if install_config_path is not None:
        try:
            context.install_config = load_config(install_config_path)
        except (FileNotFoundError, ValueError) as e:
            _error(f"Could not read install config: {e}")
            return 1

    session = AssetSession(
        default_registry().build_graph(),
        store=_state_store(fs, directory, config),
        context=context,
        fetcher=FileFetcher(fs, directory),
        fs=fs,
    )

    console.print(f"[bold]Creating {target.name}[/bold] in {directory}")
    try:
        result = await build_target(session, target)
    except AssetError as e:
        logger.debug("Resolution failed", exc_info=True)
        _error(str(e))
        return 1

    table = Table(title=f"Assets ({result.total_duration_ms:.0f}ms)")
    table.add_column("Asset")
    table.add_column("Source")
    for kind, source in result.sources.items():
        table.add_row(kind, source)
    for kind in result.purged:
        table.add_row(kind, "[dim]purged[/dim]")
    console.print(table)

    for kind, error in result.purge_errors.items():
        console.print(
            f"[yellow]WARNING: could not purge {kind}: {escape(error)}[/yellow]", soft_wrap=True
        )

    console.print(f"[green]✅ {target.name} created[/green]")
    return 0


def run_create(args: argparse.Namespace, config: InstallerConfig) -> int:
    install_config = Path(args.install_config) if args.install_config else None
    return asyncio.run(create_async(args.target, Path(args.dir), install_config, config))


def run_graph(args: argparse.Namespace) -> int:
    """Print (or write) the asset dependency graph as Graphviz DOT."""
    dot = default_registry().build_graph().to_dot()
    if args.out:
        Path(args.out).write_text(dot, encoding="utf-8")
        console.print(f"[green]Graph written to[/green] {args.out}")
    else:
        sys.stdout.write(dot)
    return 0


async def destroy_state_async(install_dir: Path, config: InstallerConfig) -> int:
    fs = RealFileSystem()
    store = FSStateStore(fs, fs.join(absolute_path(install_dir), config.state.dir_name))
    try:
        await store.destroy()
    except AssetError as e:
        _error(str(e))
        return 1
    console.print(f"[green]Asset state removed from[/green] {install_dir}")
    return 0


def run_destroy_state(args: argparse.Namespace, config: InstallerConfig) -> int:
    return asyncio.run(destroy_state_async(Path(args.dir), config))


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="clustersmith",
        description="clustersmith - generate cluster installation assets",
    )
    p.add_argument(
        "--config",
        default=None,
        help="Path to clustersmith config (.json/.yaml, default: clustersmith.yaml if present)",
    )
    p.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    create = sub.add_parser("create", help="Create installation assets for a target")
    create.add_argument(
        "target",
        choices=[t.name for t in TARGETS],
        help="; ".join(f"{t.name}: {t.description}" for t in TARGETS),
    )
    create.add_argument("--dir", default=".", help="Install directory (default: current dir)")
    create.add_argument(
        "--install-config",
        default=None,
        help="Install config (.yaml/.json) used when the install directory has none",
    )

    graph = sub.add_parser("graph", help="Print the asset dependency graph (DOT)")
    graph.add_argument("--out", default=None, help="Write to file instead of stdout")

    destroy = sub.add_parser("destroy-state", help="Delete persisted asset state")
    destroy.add_argument("--dir", default=".", help="Install directory (default: current dir)")

    return p


def main(argv: list[str] | None = None) -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    try:
        config = load_installer_config(args.config)
    except (ValidationError, ValueError) as e:
        _error(f"Could not load config: {e}")
        sys.exit(1)
    configure_from_config(config.logging, level=args.log_level)

    if args.cmd == "create":
        sys.exit(run_create(args, config))
    elif args.cmd == "graph":
        sys.exit(run_graph(args))
    elif args.cmd == "destroy-state":
        sys.exit(run_destroy_state(args, config))


if __name__ == "__main__":
    main()
