"""
Shared utilities: document storage helpers and timestamps.
"""
