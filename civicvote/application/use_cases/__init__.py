"""Application use cases orchestrating domain logic."""
