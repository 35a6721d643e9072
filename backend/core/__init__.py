"""
Core package - logging, errors, database access and startup procedure
"""
