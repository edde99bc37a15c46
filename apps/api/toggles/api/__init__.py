"""
HTTP shell: routes, dependencies and middleware.
"""
