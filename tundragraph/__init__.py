"""In-memory graph storage pieces: edge store, columnar tables, row merging and file helpers."""

__version__ = "0.1.0"
__all__ = ["edge_store", "file_utils", "graph", "rows", "table"]