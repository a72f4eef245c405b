"""HTTP Layer — FastAPI routes and global error handlers."""
