"""HTTP surface: dependencies and routers."""
