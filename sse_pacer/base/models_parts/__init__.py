"""Result model parts; import from ``sse_pacer.base.models``."""
