"""
Formatters - Convert between markdown and tracker rich-text formats.
"""

from .adf import ADFFormatter

__all__ = ["ADFFormatter"]
