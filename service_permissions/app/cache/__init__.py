"""
Cache package.

Provides the append-only decision cache owned by each evaluator. There is
no partial invalidation: the cache is dropped together with its evaluator.
"""
