"""API Routes — explicit registration, one module per concern."""
