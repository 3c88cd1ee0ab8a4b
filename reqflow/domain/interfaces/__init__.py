"""Domain Interfaces (Ports).

Abstract contracts for the outside world the orchestration core talks to:
the transport, the user-facing notifier and the response store.
"""
