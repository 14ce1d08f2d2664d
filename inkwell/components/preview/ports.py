"""
Preview component port definitions.
"""

from __future__ import annotations

from inkwell.components.articles.ports import TimePort
from inkwell.ports.cache import TTLStorePort
from inkwell.ports.db import UnitOfWorkPort

__all__ = ["TTLStorePort", "TimePort", "UnitOfWorkPort"]
