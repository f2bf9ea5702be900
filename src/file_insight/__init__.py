"""file-insight: classify files and summarize them with Claude."""

__version__ = "0.1.0"
