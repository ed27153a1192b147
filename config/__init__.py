"""
Config package initialization.
"""

from .constants import *
