"""
Accounts interface: FastAPI routers, schemas and dependency wiring
for registration, login, profile management and banking lookups.
"""
