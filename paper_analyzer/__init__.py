"""Research paper analyzer: streamed per-paper summaries and cross-paper synthesis."""

__version__ = "0.1.0"
