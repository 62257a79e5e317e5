"""
Dinebook - reservation management backend for a dining venue
"""

__version__ = "1.0.0"
