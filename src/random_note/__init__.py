"""
Advanced Random Note - Core Package

Opens a randomly chosen note from a vault, optionally narrowed down by
saved, reusable queries.
"""

__version__ = "0.1.0"
__author__ = "Advanced Random Note Team"
