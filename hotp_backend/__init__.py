"""
HTTP panel for the HOTP key, built on Flask.
"""

from .app import create_app

__all__ = ['create_app']
