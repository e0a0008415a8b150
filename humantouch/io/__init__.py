"""Input/output collaborators for humantouch.

This package contains the default glob lister and UTF-8 file reader, writer,
and copier injected into the batch orchestrator.
"""

from .files import copy_file, list_files, read_text_file, write_text_file

__all__ = ["list_files", "read_text_file", "write_text_file", "copy_file"]
