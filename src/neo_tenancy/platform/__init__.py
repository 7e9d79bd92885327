"""Platform infrastructure for neo-tenancy."""
