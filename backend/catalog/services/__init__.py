"""Services Layer — imperative shell around the pure core.

Invariants:
    - Services depend on core protocols, never on concrete repositories
    - No HTTP types (Request, Response) cross into this layer

Design Decisions:
    - One service class per aggregate (ADR: no god objects)
"""
