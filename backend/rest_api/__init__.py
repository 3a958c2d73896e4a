"""
Storefront REST API.
"""
