"""Web adapter: FastAPI app, routing table, components and routes."""
