"""End-to-end tests through the HTTP server."""
