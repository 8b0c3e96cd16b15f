"""
Shared Kernel

Building blocks reused by every app of the ground booking service:
domain events, value objects, the error taxonomy, the unit of work and
the message bus that carries domain events to subscribers.
"""
