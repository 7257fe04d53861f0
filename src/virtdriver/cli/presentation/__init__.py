"""
CLI Presentation Layer
"""

from .console import get_console, get_error_console

__all__ = [
    'get_console',
    'get_error_console'
]
