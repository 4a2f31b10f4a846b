"""User interfaces for linban."""
