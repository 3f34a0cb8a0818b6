from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

"""Column exclusion policy.

Set of header names whose cells are copied through untranslated. Built once
at startup from the CLI argument (comma-separated) and/or the YAML config
list, then never mutated.
"""

__all__ = [
    "ColumnPolicy",
]


@dataclass(frozen=True)
class ColumnPolicy:
    excluded: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_arg(cls, raw: str | None) -> ColumnPolicy:
        """Build from a literal comma-separated list such as ``"id,tel,postal"``.

        Never fails: None / "" / whitespace-only input yields a policy that
        matches nothing. Surrounding whitespace of each item is stripped and
        empty items are dropped.
        """
        if not raw:
            return cls()
        return cls.from_names(raw.split(","))

    @classmethod
    def from_names(cls, names: Iterable[str] | None) -> ColumnPolicy:
        if not names:
            return cls()
        cleaned = {n.strip() for n in names if isinstance(n, str) and n.strip()}
        return cls(frozenset(cleaned))

    def union(self, other: ColumnPolicy) -> ColumnPolicy:
        return ColumnPolicy(self.excluded | other.excluded)

    def is_excluded(self, column_name: str) -> bool:
        # 完全一致のみ (ヘッダに無い名前は単に無効)
        return column_name in self.excluded

    def unknown_columns(self, header: Iterable[str]) -> list[str]:
        """Excluded names that do not appear in `header` (diagnostics only)."""
        return sorted(self.excluded - set(header))

    def __bool__(self) -> bool:
        return bool(self.excluded)
