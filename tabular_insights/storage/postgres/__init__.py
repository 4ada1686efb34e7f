"""
PostgreSQL storage: connection management and repositories.
"""
