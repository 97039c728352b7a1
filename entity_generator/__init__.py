"""
Generate SQLAlchemy entity modules from a live MySQL schema.
"""

__version__ = "0.1.0"
