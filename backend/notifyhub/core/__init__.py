"""Shared building blocks: configuration, logging, errors, domain base classes and events."""
