"""Services Layer — imperative shell around the pure core.

Invariants:
    - Services own all DB IO and commits; core functions receive fetched data
    - Each service class wraps one AsyncSession for the lifetime of a request

Design Decisions:
    - One service file per resource for locality (accounts, products, cart, audit)
"""
