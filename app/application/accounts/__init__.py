"""
Application layer for the accounts bounded context.

Use cases coordinate domain entities and ports to fulfill
registration, login, profile and banking operations.
No framework or infrastructure imports allowed.
"""
