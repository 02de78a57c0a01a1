"""
Shared module package.

Contains cross-cutting concerns used by the accounts context:
error mapping, security middleware, rate limiting and logging setup.
"""
