"""Cross-reference matching engine for electronic component replacements."""

__version__ = "0.1.0"
