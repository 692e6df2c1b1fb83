"""
File parsers package.
"""

from vifin.parsers.sheet_parser import SheetParser

__all__ = ['SheetParser']
