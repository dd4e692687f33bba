"""Bundled data files for tidyctl."""
