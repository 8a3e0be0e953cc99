"""
Legal-aid bulk claim submission validation engine.
"""

__version__ = "1.0.0"
