"""
Standalone background services.
"""
