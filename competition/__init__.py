"""
Monster competition module.

Provides the game built on top of the engine:
- Battle (stats, effects, damage, turn scheduling)
- Data (configuration loading: text mini-language and JSON)
- CLI (command shell, console narration, entry point)
"""

__version__ = "0.1.0"
