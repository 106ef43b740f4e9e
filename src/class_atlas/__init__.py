"""Class Atlas: Java sources to UML class-diagram models and PlantUML text."""

from __future__ import annotations

__version__ = "0.1.0"
