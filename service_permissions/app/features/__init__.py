"""
Feature model package.

- ids: FeatureId, the hierarchical identifier and its canonical encoding.
- models: Feature metadata nodes and catalog entries.
- registry: The immutable feature tree built from a catalog.
"""
