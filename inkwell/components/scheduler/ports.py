"""
Scheduler component port definitions.
"""

from __future__ import annotations

from inkwell.components.articles.ports import TimePort
from inkwell.ports.db import UnitOfWorkPort

__all__ = ["TimePort", "UnitOfWorkPort"]
