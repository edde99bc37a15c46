"""
Core configuration, errors, interfaces and targeting logic.
"""
