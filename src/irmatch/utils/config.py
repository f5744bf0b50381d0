"""
Configuration constants to replace magic strings throughout irmatch
"""

import os
import tempfile

# Distinguished node kinds (namespace, name)
PRIM_NAMESPACE = "prim"
PARAM_KIND_NAME = "Param"    # wildcard / graph input boundary
RETURN_KIND_NAME = "Return"  # graph exit
KIND_SEPARATOR = "::"

# Textual IR constants
VALUE_SIGIL = "%"
GRAPH_KEYWORD = "graph"
BLOCK_PREFIX = "block"
DEFAULT_SOURCE_NAME = "<ir>"
INDENT = "  "
VALUE_NAME_PATTERN = r"[A-Za-z0-9_.]+"              # must agree with VALUE in grammar.lark
ATTRIBUTE_NAME_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"  # must agree with NAME in grammar.lark
NAME_SUFFIX_SEPARATOR = "."                         # x, x.1, x.2 when a name is reused

# Parser configuration constants (cache under temp dir to avoid cluttering project root)
DEFAULT_PARSER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "irmatch_parser.cache")

# File encoding constants
DEFAULT_FILE_ENCODING = "utf-8"

# Diagnostics
COLOR_ENV_VAR = "IRMATCH_COLOR"

# Error codes: E00xx textual IR, E01xx pattern preconditions
E_SYNTAX = "E0001"
E_UNDEFINED_VALUE = "E0002"
E_DUPLICATE_VALUE = "E0003"
E_ATTRIBUTE = "E0004"
E_PATTERN_NESTED_BLOCK = "E0101"
E_PATTERN_EXIT_ARITY = "E0102"

# CLI
PROGRAM_NAME = "irmatch"
