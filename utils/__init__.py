"""
Shared numeric helpers.
"""
