"""
Rules engine package.

Defines the grant and decision models and the evaluation engine. The
engine resolves grants most-specific-first along a feature's ancestor
chain and returns a deterministic ALLOW, VETO or UNSPECIFIED decision.

Modules of interest:
- models: Grants, modes, rules, decisions and evaluation results.
- policies: Tie-break between ALLOW and VETO at the same level.
- engine: PermissionEvaluator.
- permission_set: can_view / can_change facade.
"""
