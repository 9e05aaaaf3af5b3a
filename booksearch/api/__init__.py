"""HTTP API: routes, response schemas and middleware."""
