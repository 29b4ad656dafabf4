"""Notification infrastructure: vendor adapters, repositories and wiring."""
