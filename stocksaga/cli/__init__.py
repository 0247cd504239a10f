"""
CLI module for stocksaga - contains command-line interface components.
"""

from stocksaga.cli.main import main

__all__ = ["main"]
