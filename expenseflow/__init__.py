"""
ExpenseFlow - Source Package

A single-user expense tracker. Expenses are recorded locally,
summarised on a dashboard, filtered and searched, and moved in and
out of the app as CSV.

DESIGN PRINCIPLES:
1. All state lives in one local key-value store
2. Storage is behind an interface and injected, never a global
3. Failures are reported to the user, not raised into the UI
4. Aggregation is pure and recomputed from the full list
"""

__version__ = "1.0.0"
__author__ = "ExpenseFlow Team"
