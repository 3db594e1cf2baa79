# ========================
# src/superhost_eda/utils/__init__.py
# ========================

"""
Utilities Package

Common utilities and helper functions for the listings pipeline.
"""

from .config import Config
from .performance_monitor import monitor_performance, PerformanceMonitor
from .logging_setup import setup_logging
from .data_generator import ListingsGenerator

__all__ = [
    'Config',
    'monitor_performance',
    'PerformanceMonitor',
    'setup_logging',
    'ListingsGenerator',
]
