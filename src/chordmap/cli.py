"""Command-line entry point for inspecting profiles and running the demo."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence, TextIO

from chordmap.host import MemoryContextStore, MemoryLocationStore, ScriptedPrompter
from chordmap.keymaps import ActionContext, ActionRegistry, ChordmapError, load_builtin_kinds
from chordmap.persistence import PersistenceCodec, ProfileStore
from chordmap.session import describe


def build_store(path: Optional[str]) -> ProfileStore:
    registry = ActionRegistry(
        ActionContext(
            locations=MemoryLocationStore(),
            contexts=MemoryContextStore(),
            prompter=ScriptedPrompter(),
        )
    )
    load_builtin_kinds(registry)
    return ProfileStore(PersistenceCodec(registry), path)


def _cmd_profiles(store: ProfileStore, args: argparse.Namespace, out: TextIO) -> int:
    del args
    for name in store.names():
        out.write(f"{name}\t{len(store.records(name))}\n")
    return 0


def _cmd_show(store: ProfileStore, args: argparse.Namespace, out: TextIO) -> int:
    tree = store.load(args.name)
    for chord, node in tree.enumerate():
        out.write(describe(chord, node) + "\n")
    return 0


def _cmd_delete(store: ProfileStore, args: argparse.Namespace, out: TextIO) -> int:
    store.delete(args.name)
    out.write(f"deleted {args.name}\n")
    return 0


def _cmd_rename(store: ProfileStore, args: argparse.Namespace, out: TextIO) -> int:
    store.rename(args.old, args.new)
    out.write(f"renamed {args.old} -> {args.new}\n")
    return 0


def _cmd_demo(store: ProfileStore, args: argparse.Namespace, out: TextIO) -> int:
    del out
    from chordmap.adapters.textual.app import run  # pragma: no cover - needs a tty

    run(store_path=str(store.path), profile=args.profile)  # pragma: no cover
    return 0  # pragma: no cover


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chordmap", description="Manage saved chord binding profiles."
    )
    parser.add_argument("--store", default=None, help="Profile store file")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("profiles", help="List saved profiles and record counts")

    show = commands.add_parser("show", help="Print the bindings of a profile")
    show.add_argument("name")

    delete = commands.add_parser("delete", help="Remove a profile")
    delete.add_argument("name")

    rename = commands.add_parser("rename", help="Rename a profile")
    rename.add_argument("old")
    rename.add_argument("new")

    demo = commands.add_parser("demo", help="Run the interactive Textual demo")
    demo.add_argument("--profile", default=None)
    return parser


_COMMANDS = {
    "profiles": _cmd_profiles,
    "show": _cmd_show,
    "delete": _cmd_delete,
    "rename": _cmd_rename,
    "demo": _cmd_demo,
}


def main(argv: Optional[Sequence[str]] = None, *, out: TextIO | None = None) -> int:
    args = _parser().parse_args(argv)
    stream = out or sys.stdout
    store = build_store(args.store)
    try:
        return _COMMANDS[args.command](store, args, stream)
    except ChordmapError as exc:
        sys.stderr.write(f"chordmap: {exc}\n")
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
