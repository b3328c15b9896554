"""
Grant sources: the role to grant lookup supplied by a persistence layer.
"""
