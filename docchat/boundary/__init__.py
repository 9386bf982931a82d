"""
Boundary layer: adapters for the object store, the metadata store and the
external processing and inference backends.
"""
