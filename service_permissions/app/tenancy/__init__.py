"""
Tenancy package. Matches a grant's tenancy scope against the tenancy
context of an evaluation.
"""
