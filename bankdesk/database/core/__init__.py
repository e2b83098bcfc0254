"""
The `core` package holds the unit-of-work boundary and the read paths
built on top of it.

Contents
--------
- session
    Engine creation, session factory, ``unit_of_work`` and health probe.

- projections
    ``ProjectionLoader`` and the frozen records it returns.

- funcs
    Login and registration helpers used by the API router.
"""
