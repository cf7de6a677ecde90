"""Terminal user interface components."""
