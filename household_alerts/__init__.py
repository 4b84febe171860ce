"""
Household Alerts - Source Package

Rule evaluation and categorization engine for a personal finance and
household-management application.

DESIGN PRINCIPLES:
1. Rules are pure functions over a read-only snapshot
2. Same condition -> same notification id (dedupe key)
3. A malformed entity never breaks the whole evaluation pass
4. The store is explicitly constructed, never a global
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Alerts Team"
