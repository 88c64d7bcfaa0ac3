"""Service orchestration layer: coordinates multi-call billing workflows.

Modules:
- finalization: per-invoice state machine (date -> complete -> refresh -> e-mail).
- billing_service: collaborator interface used by the HTTP API and the CLI.
"""
