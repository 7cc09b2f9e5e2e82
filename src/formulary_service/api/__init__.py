"""HTTP API for the formulary service."""
