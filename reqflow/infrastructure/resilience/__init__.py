"""API Resilience Implementations.

Contains the per-endpoint throttler, the in-flight request deduplicator,
the bounded concurrency queue and the retry policy with exponential backoff.
Bounded Context: API Resilience
"""
