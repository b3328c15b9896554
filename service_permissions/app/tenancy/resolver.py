"""
Tenancy scope resolution.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.config import get_config


@runtime_checkable
class TenancyResolver(Protocol):
    """Answers whether a tenancy context falls within a grant's scope."""

    def covers(self, scope: Optional[str], context: Optional[str]) -> bool:
        ...


class PathTenancyResolver:
    """Tenancies as separator-delimited paths, e.g. ``/uk/london``.

    A scope covers itself and every path nested below it on a segment
    boundary, so ``/uk`` covers ``/uk/london`` but not ``/ukraine``. The
    root path (``/``) covers every context. An unrestricted scope (None)
    covers everything, including a missing context; a scoped grant never
    matches a missing context.
    """

    def __init__(self, separator: Optional[str] = None):
        self.separator = separator or get_config().tenancy_separator

    def covers(self, scope: Optional[str], context: Optional[str]) -> bool:
        if scope is None:
            return True
        if context is None:
            return False

        scope_path = self._normalise(scope)
        context_path = self._normalise(context)
        if scope_path == self.separator:
            return True
        return context_path == scope_path or context_path.startswith(scope_path + self.separator)

    def _normalise(self, path: str) -> str:
        stripped = path.strip().rstrip(self.separator)
        if not stripped.startswith(self.separator):
            stripped = self.separator + stripped
        return stripped
