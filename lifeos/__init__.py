"""
Life OS - Source Package

Core of a personal "Life Operating System": tasks, habits, finances,
CRM contacts and life goals held in one aggregate, mirrored to local
storage and optionally to a remote per-user record.

DESIGN PRINCIPLES:
1. One owner for the application state (the DataStore)
2. Every mutation derives a new, immutable root
3. Formulas and validators never raise
4. Persistence is best-effort and never blocks the caller
5. Storage backends are swappable
"""

__version__ = "1.0.0"
__author__ = "Life OS Team"
