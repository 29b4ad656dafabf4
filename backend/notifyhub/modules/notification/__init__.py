"""Notification module: multi-channel delivery of notifications and batches."""
