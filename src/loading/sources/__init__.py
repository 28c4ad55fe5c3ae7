"""
Data sources consumed by the loader.
"""

from .base import ChildRecordSource, ParentRecordSource, UserDirectory
from .json_fixture import JsonFixtureSource

__all__ = [
    "ParentRecordSource",
    "ChildRecordSource",
    "UserDirectory",
    "JsonFixtureSource",
]
