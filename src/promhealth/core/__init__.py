"""Core domain: bounds, threshold engine and alert matching."""
