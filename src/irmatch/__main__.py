"""CLI entry point: run `irmatch pattern.ir target.ir` or `python -m irmatch pattern.ir target.ir`."""

import logging
import sys
from pathlib import Path
from typing import List, Optional


def _read(path: Path, prog: str) -> Optional[str]:
    from .utils.io_utils import read_source_file

    if not path.is_file():
        sys.stderr.write(f"{prog}: error: not a file: {path}\n")
        return None
    try:
        return read_source_file(path)
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"{prog}: error: could not read file: {e}\n")
        return None


def main(argv: Optional[List[str]] = None) -> int:
    import argparse
    from .frontend.parser import parse_ir
    from .ir.printer import format_node, format_value
    from .passes.subgraph_matcher import SubgraphMatcher
    from .shared.errors import InvalidPatternError, IRSourceError
    from .utils.config import PROGRAM_NAME

    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Find every occurrence of a pattern graph in a target graph.",
    )
    parser.add_argument("pattern", type=Path, help="Path to the pattern graph (textual IR)")
    parser.add_argument("target", type=Path, help="Path to the graph to search")
    parser.add_argument("--show-maps", action="store_true",
                        help="Print the node and value correspondence of every match")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    sources = {}
    for path in (args.pattern, args.target):
        text = _read(path, PROGRAM_NAME)
        if text is None:
            return 1
        sources[path] = text

    try:
        pattern = parse_ir(sources[args.pattern], str(args.pattern))
        target = parse_ir(sources[args.target], str(args.target))
    except IRSourceError as e:
        sys.stderr.write(f"{e}\n")
        return 1

    try:
        matcher = SubgraphMatcher(pattern)
    except InvalidPatternError as e:
        sys.stderr.write(f"{PROGRAM_NAME}: error: invalid pattern: {e}\n")
        return 1

    matches = matcher.find_matches(target)
    for i, match in enumerate(matches):
        print(f"match {i}: anchor {format_node(match.anchor)}")
        if args.show_maps:
            for pn, tn in match.nodes_map.items():
                print(f"  {format_node(pn)}  =>  {format_node(tn)}")
            for pv, tv in match.values_map.items():
                print(f"  {format_value(pv)} => {format_value(tv)}")
    print(f"{len(matches)} match{'es' if len(matches) != 1 else ''} found")
    return 0


if __name__ == "__main__":
    sys.exit(main())
