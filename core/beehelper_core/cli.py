from __future__ import annotations

import argparse
from dataclasses import replace
import json
from pathlib import Path
import sys
import time
from typing import Optional, Sequence

from beehelper_core.classifier import classify
from beehelper_core.config import EngineConfig, load_engine_config
from beehelper_core.engine_logger import set_debug
from beehelper_core.paths import ENGINE_CONFIG_FILENAME, resolve_data_root
from beehelper_core.persistence import JsonFilePersistence
from beehelper_core.scorer import describe_text_nodes, locate_question
from beehelper_core.store import WordStore
from beehelper_core.tree_soup import SoupPageTree


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))


def _open_store(args: argparse.Namespace) -> WordStore:
    store = WordStore(JsonFilePersistence(resolve_data_root(args.data_dir)))
    store.load()
    return store


def _load_config(args: argparse.Namespace) -> EngineConfig:
    path = Path(args.config) if args.config else resolve_data_root(args.data_dir) / ENGINE_CONFIG_FILENAME
    config = load_engine_config(path) if args.config or path.exists() else EngineConfig()
    if args.debug:
        config = replace(config, debug=True)
    return config


def cmd_stats(args: argparse.Namespace) -> int:
    store = _open_store(args)
    _print_json(store.get_stats().to_dict())
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    store = _open_store(args)
    payload = store.export_all()
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        _print_json({"exported": len(store), "path": str(args.output)})
    else:
        print(payload)
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    try:
        payload = Path(args.path).read_text(encoding="utf-8")
    except OSError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    store = _open_store(args)
    imported = store.import_all(payload)
    store.flush()
    _print_json({"imported": imported, "totalWords": len(store)})
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    store = _open_store(args)
    store.clear()
    store.flush()
    _print_json({"cleared": True})
    return 0


def cmd_lookup(args: argparse.Namespace) -> int:
    store = _open_store(args)
    translations = store.lookup(args.word)
    _print_json({"word": args.word, "translations": translations or []})
    return 0 if translations else 1


def cmd_inspect(args: argparse.Namespace) -> int:
    try:
        markup = Path(args.html_file).read_text(encoding="utf-8")
    except OSError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    try:
        config = _load_config(args)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    tree = SoupPageTree(markup, viewport_height=args.viewport_height)
    nodes = describe_text_nodes(tree, limit=args.limit)
    _print_json(
        {
            "mode": classify(tree, selectors=config.selectors).value,
            "question": locate_question(tree, selectors=config.selectors),
            "textNodes": [
                {
                    "text": info.text,
                    "tag": info.tag,
                    "className": info.class_name,
                    "fontSize": info.font_size,
                    "top": info.top,
                    "inViewport": info.in_viewport,
                }
                for info in nodes
            ],
        }
    )
    return 0


def cmd_watch(args: argparse.Namespace) -> int:
    from selenium import webdriver

    from beehelper_core.engine import HelperEngine
    from beehelper_core.tree_selenium import SeleniumPageTree, SeleniumRenderer

    try:
        config = _load_config(args)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    store = _open_store(args)
    driver = webdriver.Chrome()
    engine = HelperEngine(
        SeleniumPageTree(driver),
        store,
        config=config,
        renderer=SeleniumRenderer(driver),
    )
    engine.tracker.add_listener(
        lambda event: print(f'learned: "{event.question}" -> "{event.answer}"', flush=True)
    )
    try:
        driver.get(args.url)
        last_length = -1
        while True:
            length = engine.tree.visible_text_length()
            if length != last_length:
                last_length = length
                engine.notify_change()
            time.sleep(args.poll_interval)
    except KeyboardInterrupt:
        pass
    finally:
        engine.close()
        driver.quit()
    _print_json(store.get_stats().to_dict())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="BeeHelper vocabulary helper.")
    parser.add_argument("--data-dir", help="Directory holding the word database, settings and stats.")
    parser.add_argument("--config", help="Engine config JSON (selectors and timing).")
    parser.add_argument("--debug", action="store_true", help="Print engine log lines.")
    sub = parser.add_subparsers(dest="command", required=True)

    stats = sub.add_parser("stats", help="Print store statistics.")
    stats.set_defaults(func=cmd_stats)

    export = sub.add_parser("export", help="Export the word database as JSON.")
    export.add_argument("--output", help="Write to a file instead of stdout.")
    export.set_defaults(func=cmd_export)

    import_cmd = sub.add_parser("import", help="Merge a JSON word mapping into the store.")
    import_cmd.add_argument("path")
    import_cmd.set_defaults(func=cmd_import)

    clear = sub.add_parser("clear", help="Remove every stored word.")
    clear.set_defaults(func=cmd_clear)

    lookup = sub.add_parser("lookup", help="Look up translations for a word.")
    lookup.add_argument("word")
    lookup.set_defaults(func=cmd_lookup)

    inspect = sub.add_parser("inspect", help="Classify a saved page and locate its question.")
    inspect.add_argument("html_file")
    inspect.add_argument("--limit", type=int, default=20)
    inspect.add_argument("--viewport-height", type=float, default=800.0)
    inspect.set_defaults(func=cmd_inspect)

    watch = sub.add_parser("watch", help="Open a page in Chrome and learn from it until interrupted.")
    watch.add_argument("url")
    watch.add_argument("--poll-interval", type=float, default=0.25)
    watch.set_defaults(func=cmd_watch)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_debug(args.debug)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
