"""Shared file I/O helpers."""

from .files import directory_size, remove_tree
from .json_io import load_json_file, write_json_atomic, write_text_atomic

__all__ = ["directory_size", "load_json_file", "remove_tree", "write_json_atomic", "write_text_atomic"]
