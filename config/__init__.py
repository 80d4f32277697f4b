"""
Database, settings and logging configuration.
"""
