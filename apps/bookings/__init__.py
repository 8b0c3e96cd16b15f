"""Bookings app package.

This app encapsulates the ground booking domain: hourly slot
reservations, the booking lifecycle (pending, approved, completed,
cancelled) and the payment ledger. Double booking is prevented by a
per-date row lock plus a partial unique index on active slots.
"""
