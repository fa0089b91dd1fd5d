"""Compliance evaluation engine.

Pure functions only: callers pass templates and certificate data in and get
immutable results back. Import from the submodules (``evaluator``,
``resolver``, ``matcher``, ``expiration``, ``insight``) directly.
"""
