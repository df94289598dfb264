"""
Shared helpers: logging, formatting, pacing.
"""
