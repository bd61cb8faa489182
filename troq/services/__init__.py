"""
High-level use cases for the Troq API.

Each service orchestrates the repository and external adapters (media host,
password hashing) to implement business rules. Routers call these services
instead of touching the storage backend directly.
"""
