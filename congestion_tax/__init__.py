"""Congestion tax calculator for road passages (Gothenburg 2013 rules)."""
from __future__ import annotations

__version__ = "0.1.0"
