"""Utility modules for omarchyctl."""
