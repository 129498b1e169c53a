# Services package init
"""
Library API — Services Layer
==============================

Service Inventory:
    - property_mapping: PropertyMappingRegistry, sort expression resolution
    - data_shaping:     ResourceShaper, sparse fieldsets
    - paged_list:       PagedList, page slicing and navigation flags
    - link_builder:     LinkBuilder, hypermedia links for items and pages
    - AuthorService:    author queries (sort, filter, page) and persistence
    - BookService:      book CRUD scoped to an author

The first four are pure and stateless per call; only the two services touch
the database.
"""
