"""CSV guest-list importer: tokenize, map, validate and batch-insert guests."""

__version__ = "0.1.0"
