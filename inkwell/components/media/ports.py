"""
Media component port definitions.
"""

from __future__ import annotations

from inkwell.components.articles.ports import TimePort
from inkwell.ports.db import MediaRepoPort, UnitOfWorkPort
from inkwell.ports.filestore import FileStorePort

__all__ = ["FileStorePort", "MediaRepoPort", "TimePort", "UnitOfWorkPort"]
