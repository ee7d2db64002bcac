"""
WayShare Backend - Services Layer
==================================

Service Inventory:
    - EntityMapper: converts between ORM records and transfer objects,
                    applies merge-patch fields, resolves sort fields
    - CrudService:  save / update / partial_update / delete / find_all /
                    find_one for one entity type, over an AsyncSession

Services take transfer objects and return transfer objects; they never see
HTTP.
"""
