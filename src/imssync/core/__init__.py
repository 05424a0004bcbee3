"""
Core module - Pure domain logic with no external dependencies.

This module contains:
- domain/: Issues, vocabularies, lookup results, mapping configuration
- ports/: Abstract interfaces that adapters must implement
- exceptions: Typed connector failures
"""

from .domain import *
from .ports import *
from .exceptions import *
