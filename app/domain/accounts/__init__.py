"""
Accounts bounded context: domain layer.

This module contains all domain logic for brokerage accounts:
- Registration records (personal data, funding source, bank details, contacts)
- Identifier formats and collision-free generation
- Registration business rules (minimum contacts, roles, dates)
- Ports for persistence, password hashing and session tokens
"""
