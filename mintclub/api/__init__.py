"""HTTP API for read-only queries."""
