"""
jsaudit CLI - ``jsaudit analyze|checks|config|report|diff``.
"""

from jsaudit.cli.app import app

__all__ = ["app"]
