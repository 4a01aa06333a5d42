"""
Adapters — Calls out to hosting platform APIs.
"""
