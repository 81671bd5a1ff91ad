from __future__ import annotations
import argparse
import hashlib
import logging
import os
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from libfbx.config import AppInfo, load_app_info
from libfbx.errors import FbxError
from libfbx.exporter import FbxExporter
from libfbx.model import NodeRecord
from libfbx.reader import read_fbx
from libfbx.summary import summarize_fbx
from libfbx.writer import serialize_tree

console = Console()
log = logging.getLogger("fbxcli")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _app_from_args(args: argparse.Namespace) -> AppInfo:
    app = load_app_info(args.config) if args.config else AppInfo()
    return app.with_overrides(
        name=args.app_name,
        version=args.app_version,
        flavour=args.flavour,
        vendor=args.vendor,
    )


def cmd_export(args: argparse.Namespace) -> int:
    app = _app_from_args(args)
    exporter = FbxExporter(args.out, app=app, overwrite=not args.no_overwrite)
    if exporter.export():
        console.print(f"[green]Wrote[/green] {args.out}")
    else:
        console.print(f"[yellow]Skipped[/yellow] {args.out} (exists, --no-overwrite)")
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    s = summarize_fbx(args.fbx)
    console.print(f"[bold]File:[/bold] {s.path}")
    console.print(f"[bold]Size:[/bold] {s.file_size} bytes")
    console.print(f"[bold]Version:[/bold] {s.version} ({s.version_str})")
    console.print(f"[bold]Creator:[/bold] {escape(s.creator or '-')}")
    console.print(f"[bold]Nodes:[/bold] {s.node_count}   [bold]Properties:[/bold] {s.property_count}")

    t = Table(title="Root records")
    t.add_column("Name", overflow="fold")
    t.add_column("Offset", justify="right")
    t.add_column("Size", justify="right")
    t.add_column("Children", justify="right")
    if s.roots:
        for r in s.roots:
            t.add_row(r.name, str(r.offset), str(r.size), str(r.children))
    else:
        t.add_row("(none)", "-", "-", "-")
    console.print(t)
    return 0


def _format_value(v) -> str:
    if isinstance(v, bytes):
        return v.hex() if len(v) <= 16 else f"{v[:16].hex()}... ({len(v)} bytes)"
    return repr(v)


def _add_tree(parent: Tree, node: NodeRecord, depth: int) -> None:
    props = ", ".join(f"{p.type.tag}:{_format_value(p.value)}" for p in node.properties)
    label = f"[bold]{escape(node.name)}[/bold]"
    if props:
        label += f"  {escape(props)}"
    branch = parent.add(label)
    if depth == 0:
        if node.children:
            branch.add(f"[dim]... {len(node.children)} children[/dim]")
        return
    for c in node.children:
        _add_tree(branch, c, depth - 1)


def cmd_dump(args: argparse.Namespace) -> int:
    f = read_fbx(args.fbx)
    root = Tree(f"[bold]{os.path.basename(args.fbx)}[/bold] (FBX {f.version})")
    for n in f.nodes:
        _add_tree(root, n, args.depth)
    console.print(root)
    return 0


def cmd_verify_roundtrip(args: argparse.Namespace) -> int:
    with open(args.fbx, "rb") as fp:
        data = fp.read()
    f = read_fbx(args.fbx)
    out = serialize_tree(f.nodes)

    a = hashlib.sha256(data).hexdigest()
    b = hashlib.sha256(out).hexdigest()
    console.print(f"IN : sha256={a}")
    console.print(f"OUT: sha256={b}")
    if a == b:
        console.print("[green]IDENTICAL[/green]")
        return 0
    console.print("[red]DIFF[/red]")
    return 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fbxcli")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    e = sub.add_parser("export", help="Write an FBX 7.4 document skeleton")
    e.add_argument("out")
    e.add_argument("--no-overwrite", action="store_true", help="Leave an existing file untouched")
    e.add_argument("--config", help="JSON file with name/version/flavour/vendor")
    e.add_argument("--app-name")
    e.add_argument("--app-version")
    e.add_argument("--flavour")
    e.add_argument("--vendor")
    e.set_defaults(fn=cmd_export)

    s = sub.add_parser("summary", help="Print info about an FBX file")
    s.add_argument("fbx")
    s.set_defaults(fn=cmd_summary)

    d = sub.add_parser("dump", help="Print the node tree")
    d.add_argument("fbx")
    d.add_argument("--depth", type=int, default=3)
    d.set_defaults(fn=cmd_dump)

    r = sub.add_parser("verify-roundtrip", help="Read->write and compare")
    r.add_argument("fbx")
    r.set_defaults(fn=cmd_verify_roundtrip)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    try:
        return int(args.fn(args))
    except (FbxError, OSError, ValueError) as e:
        log.debug("Command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
