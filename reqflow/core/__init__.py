"""Core Application Layer.

Sequences the resilience components around every outgoing call and exposes
the session facade that application code uses.
"""
