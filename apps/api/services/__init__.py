"""Service layer: business logic called by the routers."""
