"""
Core utilities shared across the Troq API.

Configuration, logging setup, password hashing and request rate limiting live
here so routers/services never read os.environ directly.
"""
