"""
Gateway service application package
"""
