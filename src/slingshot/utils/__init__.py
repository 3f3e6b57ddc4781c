"""Utility modules for slingshot."""

from .files import write_atomic
from .project import (
    RootSettings,
    configure_project_root,
    file_uri_to_path,
    get_project_root,
    resolve_path,
)

__all__ = [
    "RootSettings",
    "configure_project_root",
    "file_uri_to_path",
    "get_project_root",
    "resolve_path",
    "write_atomic",
]
