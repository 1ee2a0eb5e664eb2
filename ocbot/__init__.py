"""
OC Watch Bot
============

Discord bot that tracks which Torn faction members are in an Organized Crime.
"""

__version__ = "1.0.0"
