"""
gemini-gateway - OpenAI compatible API for Gemini Code Assist.

This package serves the OpenAI chat completions API on localhost and
forwards requests to Google's Code Assist backend using the account
signed in through gemini-cli OAuth.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
__description__ = "OpenAI compatible API for Gemini Code Assist"

# Core exports
from .core import get_settings, get_logger
from .main import create_app

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "get_settings",
    "get_logger",
    "create_app",
]
