"""
Data module - loading competition configurations.

Exports:
- ConfigParser, ParsedConfig: Text format parser
- MonsterDatabase: Loaded templates (text or JSON)
"""

from competition.data.parser import ConfigParser, ParsedConfig
from competition.data.database import MonsterDatabase

__all__ = [
    "ConfigParser",
    "ParsedConfig",
    "MonsterDatabase",
]
