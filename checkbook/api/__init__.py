"""HTTP boundary: routers and request dependencies."""
