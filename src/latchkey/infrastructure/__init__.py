"""Infrastructure layer: auth primitives, persistence, mail and HTTP API."""
