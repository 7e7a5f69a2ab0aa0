"""
High-level API for playing Pazaak.

This package provides the match driver that connects the engine, the
computer opponent and a platform adapter.
"""

from pazaak.api.match import PazaakMatch

__all__ = ["PazaakMatch"]
