"""
High-level use cases for the boxoffice backend.

Each service module implements business rules (registration, password reset,
tier upserts) on top of a DocumentStore. Routers call these services instead
of manipulating the JSON files directly.
"""
