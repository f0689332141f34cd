"""Compiler building blocks: token listing, syntax tree, symbol tables, ILOC and x86-64 assembly."""

__version__ = "0.1.0"

__all__ = ["tokens", "lexical", "errors", "iloc", "tree", "scope", "assembly"]