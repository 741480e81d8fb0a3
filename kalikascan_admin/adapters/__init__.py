"""
Adapters for the external platforms.
"""
