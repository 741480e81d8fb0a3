"""
HTTP layer of the admin service.
"""
