# Services package init
"""
PackTrack Backend — Services Layer
===================================

What:  Business logic between the routes (HTTP) and the database/disk.
How:   Services receive their collaborators (AsyncSession, FileStore)
       explicitly and are built per request in packtrack.dependencies.

Service Inventory:
    - FileStore:        document bytes on disk, public URLs
    - PackagingService: packaging items, components and documents
    - UserService:      registration, login and user CRUD
"""
