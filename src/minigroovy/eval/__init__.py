"""Evaluator handler modules for the MiniGroovy runtime."""

__all__ = [
    "bind",
    "blocks",
    "common",
    "destructure",
    "expr",
    "helpers",
    "let",
    "literals",
    "loops",
    "match",
    "mutation",
]
