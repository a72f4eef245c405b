"""API Dispatch — uniform request pipeline in front of FastAPI route handlers.

Invariants:
    - Package root contains no executable code beyond the version constant
"""

__version__ = "1.0.0"
