"""
Email reminder web application.
"""
