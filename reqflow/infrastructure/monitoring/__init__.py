"""Logging setup, domain event dispatching and connection monitoring."""
