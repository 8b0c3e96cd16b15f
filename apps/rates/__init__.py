"""Rates app package.

Holds the single rate settings record (day/night hourly prices and the
night window) and the pure rate calculator used when pricing bookings.
"""
