"""Evaluator helper modules for the Loam runtime."""

__all__ = [
    "blocks",
    "chains",
    "common",
    "control",
    "expr",
    "fn",
    "helpers",
    "loops",
    "mutation",
    "objects",
]
