"""Core domain layer of neo-tenancy: exceptions, identifiers and tenant context."""
