"""Notifications app package.

Admin feed of booking activity. Booking domain events are turned into
Notification rows and handed to a configurable dispatcher by a Celery
task.
"""
