"""
File Bundler - concatenate source files from a directory tree into one file.

This package scans a directory tree, selects files by extension, sorts them
by name or type, and writes their contents into a single bundle file with
optional source-path notes and an author line. It can also generate response
files that replay a ``bundle`` invocation later.
"""

__version__ = "0.1.0"
__author__ = "File Bundler Team"
