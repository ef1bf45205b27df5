"""
cmdk - keyboard-driven command palette
"""

__version__ = "0.1.0"
