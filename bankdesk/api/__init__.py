"""
The `api` package defines the backend’s HTTP interface, along with
supporting utilities and data models.

It integrates FastAPI routing, JWT authentication, the projection loader
and the ephemeral cache. The package ensures clean request/response
validation and secure access control.

Contents
--------
- fast_api
    Defines the FastAPI router with endpoints for:
        * User registration, login, token refresh, and logout
        * Account and transaction projections
        * Cache save and lookup
        * Health probe

- models
    Pydantic schemas for request/response validation:
        * User credentials and token payloads
        * Cache entries

- utils
    JWT utilities:
        * `create_access_token` / `create_refresh_token` — issue signed JWTs
        * `verify_token` — validates JWTs and extracts subject and role
        * `refresh_access_token` — reissues an access token with the same role

- dependencies
    FastAPI dependencies resolving app state and the current caller.
"""
