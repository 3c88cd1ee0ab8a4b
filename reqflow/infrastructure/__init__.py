"""Infrastructure Layer.

Contains concrete implementations of the orchestration components (cache,
throttler, deduplicator, queue, retry policy) and adapters for external
concerns: configuration, logging, HTTP transport and console output.
"""
