"""Infrastructure layer — form documents on disk, dependency graph engine.

This layer depends on stdlib and third-party libs (NetworkX, ruamel.yaml).
It must never import from domain, services, commands, or output.
The service layer bridges between domain models and infrastructure.
"""
