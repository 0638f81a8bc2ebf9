"""
Configuration System

Manages configuration for ledger_kg with a layered approach.

Configuration Priority (highest to lowest):
    1. Programmatic (passed to KGConfig())
    2. Environment variables (LEDGER_* prefix)
    3. Config file (KGConfig.from_file)
    4. Built-in defaults

Modules:
    settings: KGConfig class
"""

from ledger_kg.config.settings import KGConfig

__all__ = ["KGConfig"]
