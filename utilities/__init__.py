"""
Shared helpers for the Books API (logging setup).
"""
