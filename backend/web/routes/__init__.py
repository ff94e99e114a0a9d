"""HTTP routers grouped by area."""
