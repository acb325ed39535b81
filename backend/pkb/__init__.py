"""Personal knowledge base: content, tags, keyword and semantic search."""

__version__ = "0.1.0"
