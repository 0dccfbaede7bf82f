"""Base layer for the streaming pipeline.

Holds the cross-cutting primitives every session relies on: cooperative
cancellation, the error taxonomy, structured logging, timeout settings,
HTTP client construction and the small result models.
"""
