"""
Service layer: task, sharing and attachment use cases plus the cache and
authorization helpers they share. Services return ServiceResult values.
"""
