"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports
defined in the domain layer, plus the database gateway and schema.
This is where SQL, password hashing and token signing live.
"""
