"""
TBX CLI - Command Line Interface Package

This package provides command-line tools for the Treebank Explorer.

Modules:
    cli: Main CLI application

University of Athens - Nikolaos Lavidas
"""

from tbx_cli.cli import main, cli

__version__ = "1.0.0"
__author__ = "Nikolaos Lavidas"

__all__ = [
    "main",
    "cli",
]
