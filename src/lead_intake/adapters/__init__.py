"""Auth provider adapters."""
