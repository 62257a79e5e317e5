"""
Services module
"""

from dinebook.services.reservation_lifecycle import RemovalAck, ReservationLifecycle

__all__ = ["RemovalAck", "ReservationLifecycle"]
