"""Infrastructure Layer — database engine, credential primitives, logging setup.

Invariants:
    - Infrastructure may import core/errors.py for error mapping, never core domain logic
    - Retry/timeout policy for persistence lives here (pool_pre_ping, pool_recycle), not in core

Design Decisions:
    - Thin wrappers over SQLAlchemy, bcrypt and PyJWT: one module per concern
"""
