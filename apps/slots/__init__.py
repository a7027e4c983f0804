"""Slots app package.

Holds the slot store (time windows published by providers) and the slot
allocator, the single writer of slot availability. Reservation relies on
conditional UPDATE statements so that a slot can never be claimed twice.
"""
