"""Defines common Value Objects used across the orchestration layer.

These objects represent simple values like endpoint prefixes and classes,
ensuring consistency and type safety.
"""

from typing import NewType, Any, Dict, Tuple

# === Routing Context ===
EndpointPrefix = NewType("EndpointPrefix", str)   # Configured URL path prefix, e.g. '/api/auth/'
EndpointClass = NewType("EndpointClass", str)     # Longest matched prefix for a URL

# URLs matching no configured prefix share this class
DEFAULT_ENDPOINT_CLASS = EndpointClass("*")

# === Request Context ===
HttpMethod = NewType("HttpMethod", str)           # Upper-cased, e.g. 'GET'
Headers = Dict[str, str]
NormalizedParams = Tuple[Tuple[str, Any], ...]    # Sorted, hashable query parameters
