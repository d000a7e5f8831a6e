"""
Domain layer - entities and collaborator interfaces.

This layer contains the core on-air value objects and the protocols the
orchestrator talks to, independent of any remote service.
"""
