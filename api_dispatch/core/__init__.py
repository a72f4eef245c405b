"""Core Layer — pure dispatch logic, no IO, no async, no framework imports.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - Collaborators (log sink, authorization hook) reach core through boundary_protocols
"""
