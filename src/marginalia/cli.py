"""CLI for marginalia - live-markup entries with wiki-links and tags."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.sqlite_index import SQLiteIndex
from .markdown.renderer import NO_CURSOR, wiki_link_base
from .markdown.tags import extract_tags_from_title
from .markdown.tokenizer import tokenize
from .runtime import build_runtime

logger = logging.getLogger(__name__)


def _read_source(args: argparse.Namespace) -> str:
    """Text from --file, or stdin when no file is given."""
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    return sys.stdin.read()


def cmd_new(args: argparse.Namespace, rt: Any) -> int:
    """Create a new entry."""
    content = args.content
    if content is None and args.file:
        content = Path(args.file).read_text(encoding="utf-8")

    entry = rt.store.create(args.title, content or "")

    if args.json:
        print(json.dumps({"id": entry.id, "title": entry.title, "tags": entry.tags}))
    elif not args.quiet:
        print(entry.id)
    return 0


def cmd_show(args: argparse.Namespace, rt: Any) -> int:
    """Print an entry's title, tags and raw text."""
    entry = rt.store.get(args.id)
    if entry is None:
        print(f"Entry {args.id} not found", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({
            "id": entry.id,
            "title": entry.title,
            "tags": entry.tags,
            "content": entry.content,
        }, indent=2))
        return 0

    print(entry.title)
    if entry.tags:
        print(" ".join(f"#{t}" for t in entry.tags))
    print()
    print(entry.content, end="" if entry.content.endswith("\n") else "\n")
    return 0


def cmd_ls(args: argparse.Namespace, rt: Any) -> int:
    """List entries newest first, optionally filtered by title text or tag."""
    entries = rt.store.search(args.search or "")
    if args.tag:
        entries = [e for e in entries if args.tag in e.tags]

    if args.json:
        output = [
            {
                "id": e.id,
                "title": e.title,
                "tags": e.tags,
                "created": e.created.isoformat() if e.created else None,
            }
            for e in entries
        ]
        print(json.dumps(output, indent=2))
        return 0

    for entry in entries:
        if args.quiet:
            print(entry.id)
        else:
            print(f"{entry.id}\t{entry.title}")
    return 0


def cmd_edit(args: argparse.Namespace, rt: Any) -> int:
    """Change an entry's title (re-extracting tags) and/or text."""
    content = args.content
    if content is None and args.file:
        content = Path(args.file).read_text(encoding="utf-8")
    if args.title is None and content is None:
        print("Error: nothing to change; pass --title, --content or --file", file=sys.stderr)
        return 1

    entry = rt.store.update(args.id, title=args.title, content=content)
    if entry is None:
        print(f"Entry {args.id} not found", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({"id": entry.id, "title": entry.title, "tags": entry.tags}))
    elif not args.quiet:
        print(f"Updated {entry.id}")
    return 0


def cmd_rm(args: argparse.Namespace, rt: Any) -> int:
    """Delete an entry."""
    if rt.store.get(args.id) is None:
        print(f"Entry {args.id} not found", file=sys.stderr)
        return 1

    if not args.yes:
        response = input(f"Delete entry {args.id}? [y/N] ")
        if response.lower() not in ("y", "yes"):
            print("Aborted")
            return 0

    rt.store.delete(args.id)
    if not args.quiet:
        print(f"Deleted {args.id}")
    return 0


def cmd_render(args: argparse.Namespace, rt: Any) -> int:
    """Render an entry, a file or stdin to HTML."""
    link_base = wiki_link_base(args.wiki) if args.wiki else None

    if args.id:
        entry = rt.store.get(args.id)
        if entry is None:
            print(f"Entry {args.id} not found", file=sys.stderr)
            return 1
        text = entry.content
    else:
        text = _read_source(args)

    result = rt.renderer.render_text(text, args.cursor, link_base)
    if args.json:
        print(json.dumps({
            "tokens": [t.to_dict() for t in result.tokens],
            "html": result.html,
        }, indent=2))
    else:
        print(result.html)
    return 0


def cmd_tokens(args: argparse.Namespace, rt: Any) -> int:
    """Dump the token stream as JSON."""
    text = _read_source(args)
    print(json.dumps([t.to_dict() for t in tokenize(text)], indent=2))
    return 0


def cmd_tags(args: argparse.Namespace, rt: Any) -> int:
    """Split a title into tags and cleaned title."""
    result = extract_tags_from_title(args.title)
    print(json.dumps({"tags": result.tags, "cleaned_title": result.cleaned_title}))
    return 0


def cmd_links(args: argparse.Namespace, rt: Any) -> int:
    """Show outgoing wiki-links of an entry."""
    if rt.store.get(args.id) is None:
        print(f"Entry {args.id} not found", file=sys.stderr)
        return 1

    rt.index.rebuild()
    links = rt.index.links_out(args.id)
    titles = rt.index.titles(sorted({link.target for link in links}))

    if args.json:
        output = [
            {
                "target": link.target,
                "title": titles.get(link.target),
                "display": link.display,
                "start": link.range.start if link.range else None,
                "end": link.range.end if link.range else None,
            }
            for link in links
        ]
        print(json.dumps(output, indent=2))
        return 0

    for link in links:
        title = titles.get(link.target)
        if title is None:
            print(f"{link.target}\t(missing)")
        else:
            print(f"{link.target}\t{title}")
    return 0


def cmd_backlinks(args: argparse.Namespace, rt: Any) -> int:
    """Show entries that link to an entry."""
    rt.index.rebuild()
    sources = rt.index.backlinks(args.id)
    titles = rt.index.titles(sources)

    if args.json:
        print(json.dumps([{"id": s, "title": titles.get(s, "")} for s in sources], indent=2))
        return 0

    if not sources and not args.quiet:
        print(f"No backlinks to {args.id}")
    for src in sources:
        print(f"{src}\t{titles.get(src, '')}")
    return 0


def cmd_reindex(args: argparse.Namespace, rt: Any) -> int:
    """Build or repair the SQLite index."""
    if not isinstance(rt.index, SQLiteIndex):
        print("Error: Index is not a SQLiteIndex", file=sys.stderr)
        return 1

    if not args.quiet and not args.json:
        print(f"Reindexing entries... (full={args.full})")

    counts = rt.index.rebuild(full=args.full)

    if args.json:
        print(json.dumps(counts))
    elif not args.quiet:
        print(f"Scanned: {counts['scanned']}")
        print(f"Dirty: {counts['dirty']}")
        print(f"Inserted: {counts['inserted']}")
        print(f"Updated: {counts['updated']}")
        print(f"Removed: {counts['removed']}")
        if counts["failed"] > 0:
            print(f"Failed: {counts['failed']}")

    return 1 if counts["failed"] else 0


def cmd_watch(args: argparse.Namespace, rt: Any) -> int:
    """Watch the entry directory and incrementally reindex."""
    from .watch import watch_store

    return watch_store(
        store_path=rt.store.storage.root,
        index=rt.index,
        debounce_ms=args.debounce_ms,
        quiet=args.quiet,
        json_output=args.json,
    )


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start local JSON API server."""
    import uvicorn

    from .api.app import create_app, generate_token

    token: str | None
    if args.token == "auto":
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif args.token == "none":
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = args.token

    app = create_app(rt, token=token, enable_cors=args.cors)

    print(f"Starting server on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marginalia", description="Marginalia CLI"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/marginalia.toml, store/marginalia.toml)",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Path to entry directory (overrides config)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to SQLite index DB (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: from config, else WARNING)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # new command
    parser_new = subparsers.add_parser("new", help="Create a new entry")
    parser_new.add_argument("title", help="Entry title; #words become tags")
    parser_new.add_argument("--content", default=None, help="Entry text")
    parser_new.add_argument("--file", default=None, help="Read entry text from file")

    # show command
    parser_show = subparsers.add_parser("show", help="Print an entry")
    parser_show.add_argument("id", help="Entry ID")

    # ls command
    parser_ls = subparsers.add_parser("ls", help="List entries")
    parser_ls.add_argument("--tag", default=None, help="Only entries carrying this tag")
    parser_ls.add_argument(
        "--search", default=None, help="Case-insensitive title substring"
    )

    # edit command
    parser_edit = subparsers.add_parser("edit", help="Change an entry's title or text")
    parser_edit.add_argument("id", help="Entry ID")
    parser_edit.add_argument("--title", default=None, help="New title; #words become tags")
    edit_body = parser_edit.add_mutually_exclusive_group()
    edit_body.add_argument("--content", default=None, help="New entry text")
    edit_body.add_argument("--file", default=None, help="Read new entry text from file")

    # rm command
    parser_rm = subparsers.add_parser("rm", help="Delete an entry")
    parser_rm.add_argument("id", help="Entry ID")
    parser_rm.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    # render command
    parser_render = subparsers.add_parser("render", help="Render markup to HTML")
    parser_render.add_argument("id", nargs="?", default=None, help="Entry ID (default: stdin)")
    parser_render.add_argument("--file", default=None, help="Render a file instead")
    parser_render.add_argument(
        "--cursor", type=int, default=NO_CURSOR,
        help="Caret offset; spans touching it render raw (default: none)"
    )
    parser_render.add_argument(
        "--wiki", default=None, help="Published wiki slug for wiki-link hrefs"
    )

    # tokens command
    parser_tokens = subparsers.add_parser("tokens", help="Dump tokens as JSON")
    parser_tokens.add_argument("--file", default=None, help="Read from file (default: stdin)")

    # tags command
    parser_tags = subparsers.add_parser("tags", help="Extract tags from a title")
    parser_tags.add_argument("title", help="Title text")

    # links command
    parser_links = subparsers.add_parser("links", help="Show outgoing wiki-links")
    parser_links.add_argument("id", help="Entry ID")

    # backlinks command
    parser_backlinks = subparsers.add_parser("backlinks", help="Show incoming wiki-links")
    parser_backlinks.add_argument("id", help="Entry ID")

    # reindex command
    parser_reindex = subparsers.add_parser("reindex", help="Build or repair SQLite index")
    parser_reindex.add_argument(
        "--full", action="store_true", help="Force full rebuild"
    )

    # watch command
    parser_watch = subparsers.add_parser("watch", help="Watch entries for changes")
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=150,
        help="Debounce window in milliseconds (default: 150)"
    )

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument(
        "--host", default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser_serve.add_argument(
        "--port", type=int, default=8765,
        help="Port to bind to (default: 8765)"
    )
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token (auto|<string>|none, default: auto)"
    )
    parser_serve.add_argument(
        "--cors", action="store_true",
        help="Enable CORS (default: false)"
    )

    return parser


HANDLERS = {
    "new": cmd_new,
    "show": cmd_show,
    "ls": cmd_ls,
    "edit": cmd_edit,
    "rm": cmd_rm,
    "render": cmd_render,
    "tokens": cmd_tokens,
    "tags": cmd_tags,
    "links": cmd_links,
    "backlinks": cmd_backlinks,
    "reindex": cmd_reindex,
    "watch": cmd_watch,
    "serve": cmd_serve,
}


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    rt = build_runtime(
        store_path=args.store,
        db_path=args.db,
        config_path=args.config,
    )

    level = (args.log_level or rt.config.log.level).upper()
    if level not in logging.getLevelNamesMapping():
        print(f"Error: unknown log level: {level}", file=sys.stderr)
        sys.exit(1)
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")

    handler = HANDLERS.get(args.cmd)
    if handler is None:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)

    try:
        exit_code = handler(args, rt)
    except Exception as e:
        logger.debug("command %s failed", args.cmd, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
