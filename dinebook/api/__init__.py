"""
API routers
"""

from dinebook.api import diners, payments, reservations, tables

__all__ = ["diners", "payments", "reservations", "tables"]
