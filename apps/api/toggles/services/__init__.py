"""
Application services: audit logging and authentication.
"""
