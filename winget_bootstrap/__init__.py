"""winget bootstrapper (Python-first, step-driven).

Core design goals:
- Idempotent steps
- Offline-first package strategy with a single remote fallback
- Architecture-aware package selection
- Centralized logging
"""

__all__ = []
