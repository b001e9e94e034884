"""HTTP inbound adapter: request handling and server."""
