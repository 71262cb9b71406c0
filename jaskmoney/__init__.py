"""
jaskmoney - keyboard-driven personal finance TUI
"""

__version__ = "0.3.0"
