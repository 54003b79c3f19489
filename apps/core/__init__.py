"""
Core app - Shared abstractions and utilities.

This app provides platform-agnostic helpers for:
- Record identifiers (24-character hex ids, see ids.py)
- Error rendering for the API (see errors.py)

It holds no models and is not listed in INSTALLED_APPS.
"""
