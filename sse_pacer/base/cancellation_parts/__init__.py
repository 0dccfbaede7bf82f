"""Concrete cancellation types; import from ``sse_pacer.base.cancellation``."""
