"""
Database backends for the docbench load harness.
"""

from .base import Database, DatabaseError
from .memory import MemoryDatabase

__all__ = ['Database', 'DatabaseError', 'MemoryDatabase']
