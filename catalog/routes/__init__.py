# Routes package init
"""
Catalog Manager - Routes Package
==================================

Route Inventory:
    - entries.py: GET/POST /api/entries, GET/PUT/DELETE /api/entries/{id}
    - upload.py:  POST /api/upload
    - health.py:  GET  /health
    - ui.py:      GET  /, POST /ui/entries, POST /ui/entries/{id}/delete

Design Principle:
    Routes stay THIN. API routes delegate to services; UI routes delegate to
    the UI controller, which in turn only speaks HTTP to the API routes.
"""
