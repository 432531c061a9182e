"""
Document store layer.

Responsibilities:
- Hold the Restaurant and Comment collections for the lifetime of the process.
- Seed the restaurant catalogue from the bundled CSV on open.
- Answer the reads the ranking engine needs (match, list, per-restaurant comments).
"""
