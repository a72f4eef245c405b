"""Infrastructure — logging setup and the stdlib-backed log sink."""
