"""
Shared infrastructure: database sessions, exceptions, logging.
"""
