"""HTTP API: application factory, routers, middleware and the response envelope."""
