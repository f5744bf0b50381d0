"""
Textual IR frontend: grammar, parser and name resolution.
"""

from .parser import Parser, parse_ir, parse_ir_file

__all__ = ["Parser", "parse_ir", "parse_ir_file"]
