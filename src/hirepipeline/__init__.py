"""Round-progression engine for multi-round hiring pipelines."""

__version__ = "0.1.0"
