"""
Contact book service: validated CRUD over personal contacts.
"""

__version__ = "0.1.0"
