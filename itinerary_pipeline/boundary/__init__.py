"""
Boundary layer: adapters for the document store, AWS and partner CDNs.
"""
