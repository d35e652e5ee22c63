"""Shared utilities for ultra-robust BBCode parsing.

This module provides shared data structures, configuration objects, result
types and logging helpers used across all processing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    LexerConfig,
    ParserConfig,
    RenderConfig,
    TreeConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "CorrelationLogger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "GlobalConfig",
    "LexerConfig",
    "ParserConfig",
    "PerformanceMetrics",
    "RenderConfig",
    "TreeConfig",
    "get_logger",
]
