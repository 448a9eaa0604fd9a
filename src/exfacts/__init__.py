"""Semantic fact extraction from Elixir syntax trees."""

from exfacts.config import ExtractionOptions, load_options

__all__ = ["ExtractionOptions", "load_options"]
