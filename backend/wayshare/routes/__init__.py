"""
WayShare Backend - API Routes Package
======================================

Route Inventory:
    - entities.py: build_entity_router(), the six CRUD endpoints of each
                   entity under /api/<path>
    - headers.py:  alert / error / params header builders
    - health.py:   GET /health

Routes stay thin: parse the request, guard identity invariants, call the
entity's service, set status codes and headers. Persistence rules live in
wayshare.services.
"""
