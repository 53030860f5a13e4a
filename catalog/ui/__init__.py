# UI package init
"""
Catalog Manager - Presentation Layer
======================================

What:  Server-rendered browser UI for listing, searching, creating, editing
       and deleting entries.

Modules:
    - state.py:      AppState and its pure transitions
    - search.py:     substring search over the fetched collection
    - client.py:     httpx client for the /api endpoints
    - controller.py: load / submit / confirm-delete flows
    - views.py:      view models and Jinja2 rendering (autoescaped)
"""
