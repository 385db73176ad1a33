# Routes package init
"""
PackTrack Backend — API Routes Package
=======================================

Route Inventory:
    - packaging.py: /api/v1/packaging        (items, components, documents)
    - users.py:     /api/v1/users            (register, login, user CRUD)
    - health.py:    /health                  (service health check)

Routes stay thin: parse the request, call a service, wrap the result in
the {success, message, data} envelope.
"""
