"""Election session lifecycle and scoped notification service."""
