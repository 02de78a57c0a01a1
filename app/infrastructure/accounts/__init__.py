"""
Infrastructure adapters for the accounts bounded context.

Each adapter implements a domain port (ABC) and connects
to external systems: the relational database, bcrypt, JWT.
"""
