# Routes package init
"""
Library API — API Routes Package
==================================

Route Inventory:
    - authors.py:             GET/POST  /api/authors
                              GET/POST/DELETE /api/authors/{id}
    - author_collections.py:  POST /api/authorcollections
                              GET  /api/authorcollections/({ids})
    - books.py:               GET/POST /api/authors/{author_id}/books
                              GET/PUT/DELETE /api/authors/{author_id}/books/{id}
    - health.py:              GET /health

Routes stay thin: they validate query input with the boolean validators,
call a service, then shape the result and attach links.
"""
