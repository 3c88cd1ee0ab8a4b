"""Domain Event definitions.

Represents significant occurrences in a call's lifecycle that other parts
of the system (logging, UI, metrics) might react to.
"""
