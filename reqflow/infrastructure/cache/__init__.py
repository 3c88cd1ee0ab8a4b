"""Response Cache Implementation.

Provides the in-memory, TTL-bounded response store for idempotent requests.
Bounded Context: Cache Management
"""
