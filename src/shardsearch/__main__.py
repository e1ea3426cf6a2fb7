from __future__ import annotations
import argparse, os, sys
from . import config as CFG
from .engine import Engine

def _supports_color() -> bool:
    return sys.stdout.isatty() and os.environ.get("NO_COLOR", "") == ""

CSI = "\033["
def _c(text: str, code: str) -> str:
    if not _supports_color(): return text
    return f"{CSI}{code}m{text}{CSI}0m"

def _print_hits(hits: dict[str, int]) -> None:
    if not hits:
        print(_c("(no matches)", "2;37")); return
    print(_c("Count  Document", "1;37"))
    for name, count in sorted(hits.items(), key=lambda kv: (-kv[1], kv[0])):
        print(f"{count:<6} {name}")

def _print_suggestions(words: list[str]) -> None:
    if not words:
        print(_c("(no suggestions)", "2;37")); return
    for w in words:
        print(f"  {w}")

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sharded search REPL")
    parser.add_argument("--roots", nargs="+", default=[], help="Folders of text files to index")
    parser.add_argument("--limit", type=int, default=CFG.SUGGEST_LIMIT, help="Max suggestions per prefix")
    parser.add_argument("--async-rebuild", action="store_true",
                        help="Rebuild autocomplete structures in the background")
    parser.add_argument("--whole-words", action="store_true",
                        help="Exact search matches whole query words only")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    eng = Engine(async_rebuild=args.async_rebuild, whole_words=args.whole_words, verbose=args.verbose or CFG.VERBOSE)
    try:
        if args.roots:
            n = eng.ingest(args.roots)
            eng.flush()
            print(f"Indexed {n:,} documents.")

        print("Type a word to search, '?prefix' for suggestions (empty to quit).")
        print(_c("Commands: :flush, :stats", "2;37"))
        while True:
            try:
                raw = input("> ")
            except EOFError:
                print(); break
            line = raw.strip()
            if line == "":
                print("Goodbye!"); break
            if line == ":flush":
                eng.flush(); print(_c("(flushed)", "2;36")); continue
            if line == ":stats":
                s = eng.stats()
                print(f"leaves={s.leaves} frozen={s.frozen_leaves} words={s.words} pending={s.pending}")
                continue
            if line.startswith("?"):
                _print_suggestions(eng.suggest(line[1:], args.limit))
                continue
            _print_hits(eng.search(line))
    finally:
        eng.shutdown()
    return 0

if __name__ == "__main__":
    sys.exit(main())
