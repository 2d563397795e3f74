"""
Services Package

Business logic behind the routes. Every function takes the AccessEngine
and the calling principal, and authorizes against entities re-loaded from
the store.

Modules are imported directly (tasklane.services.lists, ...).
"""
