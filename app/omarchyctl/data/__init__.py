"""Bundled data files for omarchyctl."""
