# Routes package init
"""
Notekeeper Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles a specific resource.

Route Inventory:
    - notes.py:        /api/notes             (CRUD, soft delete, restore)
    - recycle_bin.py:  /api/recycle-bin       (list, count, empty, restore all)
    - health.py:       GET /health            (service + backend probe)

Design Principle:
    Routes are THIN. They handle HTTP concerns only:
    - Extract data from the request (path params, body)
    - Call the repository obtained through Depends(get_repository)
    - Turn not-found results into 404 and pick the status code

    Storage semantics live in the repository adapters, not here.
"""
