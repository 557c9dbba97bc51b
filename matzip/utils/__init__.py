"""
utils/ - Shared helpers
=======================
Cross-cutting utilities used by every layer (currently logging only).
"""
