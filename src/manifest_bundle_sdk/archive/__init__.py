"""Uniform access to .zip, .7z and .rar archives."""

from ._dispatcher import ARCHIVE_SUFFIXES, is_archive_name, open_archive, open_archive_file

__all__ = [
    "ARCHIVE_SUFFIXES",
    "is_archive_name",
    "open_archive",
    "open_archive_file",
]
