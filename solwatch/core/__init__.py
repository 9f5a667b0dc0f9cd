"""
Core utilities: exceptions and cross-cutting concerns shared by the watcher,
analytics services, stores and API server.
"""
