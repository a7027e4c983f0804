"""Bookings app package.

This app encapsulates the booking lifecycle: creating a reservation on top
of an atomic slot claim, the pending/confirmed/cancelled status machine,
checkin and calendar export. Slot availability and booking rows are kept
consistent through conditional updates and compensating releases rather
than long-held locks.
"""
