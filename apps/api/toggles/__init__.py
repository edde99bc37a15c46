"""
Feature toggle configuration service.
"""

__version__ = "1.0.0"
