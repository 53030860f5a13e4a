# Services package init
"""
Catalog Manager - Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).

Service Inventory:
    - EntryService:  the Store (list, get, create, replace, remove, seed)
    - UploadService: image upload validation and storage
"""
