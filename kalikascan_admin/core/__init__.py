"""
Domain services of the admin API.
"""
