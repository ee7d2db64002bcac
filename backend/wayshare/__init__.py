"""
WayShare Backend - Application Package Initializer
===================================================

What: Marks the `wayshare` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows the same layered architecture for every entity:

    ┌─────────────────────────────────────┐
    │     Routes (Transport Endpoints)    │  ← ID guards, status codes, alert headers
    ├─────────────────────────────────────┤
    │         Services (CrudService)      │  ← create/update/patch/delete/find
    ├─────────────────────────────────────┤
    │     Mappers (EntityMapper)          │  ← Record <-> Transfer Object
    ├─────────────────────────────────────┤
    │   Models (ORM) & Schemas (DTOs)     │  ← SQLAlchemy rows + Pydantic DTOs
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The seven entities (Member, Profile, Ride, RideRequest, Notification,
    Message, Rating) share one generic implementation of each layer,
    parametrized by an EntityDefinition (see wayshare.entities).
    The client side of the protocol lives in wayshare.client.
"""

__version__ = "1.0.0"
