"""
Shared code for gateway services
"""
