"""Service Layer — the dispatcher and the handler registry it routes through."""
