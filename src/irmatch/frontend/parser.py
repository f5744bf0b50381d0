"""
Parser

Textual IR -> ``Graph``: Lark parses the source, ``IRTransformer`` builds the
syntax tree and ``GraphBuilder`` resolves value names.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from lark import Lark
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError

from .lowering import GraphBuilder
from .transformer import IRTransformer
from ..ir.nodes import Graph
from ..shared.errors import ErrorReporter, IRSourceError
from ..shared.source_location import SourceLocation
from ..utils.config import DEFAULT_PARSER_CACHE_FILE, DEFAULT_SOURCE_NAME, E_SYNTAX
from ..utils.io_utils import read_source_file

logger = logging.getLogger("irmatch.frontend.parser")


class Parser:
    """
    Textual IR parser.

    - Takes source text, returns a ``Graph``
    - Preserves source locations for diagnostics
    - Uses a Lark LALR parser with on-disk grammar caching
    """

    def __init__(self, cache_file: Optional[str] = DEFAULT_PARSER_CACHE_FILE):
        grammar_path = Path(__file__).parent / "grammar.lark"
        self.parser = Lark.open(
            str(grammar_path),
            start='start',
            parser='lalr',              # Required for caching
            cache=cache_file or False,
            propagate_positions=True,   # Source locations for diagnostics
            maybe_placeholders=False,   # Omitted optionals leave no child
        )
        self.transformer = IRTransformer()

    def parse(self, source: str, source_file: str = DEFAULT_SOURCE_NAME) -> Graph:
        """Parse ``source`` into a graph; raises ``IRSourceError`` on any error."""
        self.transformer.current_file = source_file
        try:
            tree = self.parser.parse(source)
            syntax = self.transformer.transform(tree)
        except UnexpectedInput as e:
            raise _syntax_error(e, source, source_file) from e
        except VisitError as e:
            if isinstance(e.orig_exc, IRSourceError):
                e.orig_exc.source_code = source
                raise e.orig_exc from e
            raise

        reporter = ErrorReporter({source_file: source})
        graph = GraphBuilder(reporter).build(syntax)
        logger.debug(f"Parsed {source_file}: {len(graph.nodes)} top-level nodes")
        return graph


def _syntax_error(e: UnexpectedInput, source: str, source_file: str) -> IRSourceError:
    location = None
    if getattr(e, "line", -1) > 0:
        location = SourceLocation(file=source_file, line=e.line, column=e.column)

    help_text = None
    if isinstance(e, UnexpectedToken):
        if e.token.type == "$END":
            message = "unexpected end of input"
        else:
            message = f"unexpected token `{e.token}`"
        expected = sorted(e.accepts or e.expected)
        if expected:
            help_text = f"expected one of: {', '.join(expected)}"
    elif isinstance(e, UnexpectedCharacters):
        message = f"unexpected character `{source[e.pos_in_stream]}`"
    elif isinstance(e, UnexpectedEOF):
        message = "unexpected end of input"
    else:
        message = "syntax error"

    return IRSourceError(
        message,
        location,
        error_code=E_SYNTAX,
        source_code=source,
        help=help_text,
    )


@lru_cache(maxsize=None)
def _default_parser() -> Parser:
    return Parser()


def parse_ir(source: str, source_file: str = DEFAULT_SOURCE_NAME) -> Graph:
    """Parse textual IR with a shared parser instance."""
    return _default_parser().parse(source, source_file)


def parse_ir_file(path: Union[Path, str]) -> Graph:
    """Read and parse a textual IR file; locations refer to ``path``."""
    return parse_ir(read_source_file(path), str(path))


