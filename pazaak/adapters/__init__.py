"""
Platform adapters for Pazaak.

This package provides adapters that translate between the core game engine
and the platforms a match is played on (console, automated tests).
"""

from pazaak.adapters.base import PlatformAdapter
from pazaak.adapters.cli import CLIAdapter
from pazaak.adapters.dummy import DummyAdapter

__all__ = ["PlatformAdapter", "CLIAdapter", "DummyAdapter"]
