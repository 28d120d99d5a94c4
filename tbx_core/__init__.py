"""
TBX Core - Treebank Explorer Core Module

This package provides the data model, configuration, logging and error
taxonomy shared by the parser, index, search and statistics packages.

Modules:
    models: Token and Sentence records
    config_runtime: Runtime configuration and path resolution
    logging_monitoring: Log formatting and operation timing
    errors: Exception taxonomy

University of Athens - Nikolaos Lavidas
"""

from tbx_core.models import Token, Sentence

from tbx_core.errors import CorpusError, RetrievalError

from tbx_core.config_runtime import (
    RuntimeConfig,
    PathResolver,
    get_runtime_config,
    get_setting,
)

from tbx_core.logging_monitoring import (
    ConsoleFormatter,
    StructuredFormatter,
    setup_logging,
    timed,
)

__version__ = "1.0.0"
__author__ = "Nikolaos Lavidas"
__institution__ = "University of Athens"

__all__ = [
    "Token",
    "Sentence",
    "CorpusError",
    "RetrievalError",
    "RuntimeConfig",
    "PathResolver",
    "get_runtime_config",
    "get_setting",
    "ConsoleFormatter",
    "StructuredFormatter",
    "setup_logging",
    "timed",
]
