"""Dot separated full paths of variables."""

from typing import Optional


class PathBuilder:
    """Immutable builder for full paths like ``DataBlocksGlobal.Db.Var``.

    Examples:
        >>> PathBuilder("Root").child("Db").child("Var").path
        'Root.Db.Var'
        >>> PathBuilder().child("").child("Var").path
        'Var'
    """

    SEPARATOR = "."

    def __init__(self, root: Optional[str] = None):
        self._path = root or ""

    @property
    def path(self) -> str:
        return self._path

    def child(self, segment: Optional[str]) -> "PathBuilder":
        if not segment:
            return self
        if not self._path:
            return PathBuilder(segment)
        return PathBuilder(f"{self._path}{self.SEPARATOR}{segment}")

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"<PathBuilder {self._path!r}>"
