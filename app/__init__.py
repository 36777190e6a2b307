"""Notification and realtime backend of the fresh food community platform."""
