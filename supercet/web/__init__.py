"""HTTP transport for the session engine."""
