"""reqflow: resilient request orchestration for API clients.

Bounds concurrency, paces calls per endpoint class, caches read responses,
supersedes duplicate in-flight calls and retries transient failures.
"""

__version__ = "0.1.0"
