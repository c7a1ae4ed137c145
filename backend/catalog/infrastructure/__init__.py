"""Infrastructure Layer — persistence and cross-cutting concerns.

Invariants:
    - Infrastructure implements core protocols; core never imports from here
    - All SQLAlchemy exceptions mapped to catalog store errors before leaving this layer

Design Decisions:
    - One module per concern: session manager, repository, logging
"""
