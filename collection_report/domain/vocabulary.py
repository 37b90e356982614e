"""Controlled vocabulary of branch names."""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence

DEFAULT_BRANCHES: tuple[str, ...] = (
    "FAROOK",
    "KADALUNDI",
    "RAMANATTUKARA",
    "MANANCHIRA",
    "NADAKKAVU",
    "MEDICAL COLLEGE",
    "MUKKAM",
    "KUNNAMANGALAM",
    "MAVOOR ROAD",
    "NARIKKUNI",
    "KALLAI",
    "ENGAPUZHA",
    "THIRUVAMBADI",
)


def branch_key(name: str | None) -> str:
    return str(name or "").strip().upper()


class BranchVocabulary(Sequence[str]):
    """Ordered, read-only set of branch names with case-insensitive identity."""

    def __init__(self, names: Iterable[str]) -> None:
        ordered: list[str] = []
        seen: set[str] = set()
        for name in names:
            text = str(name or "").strip()
            key = branch_key(text)
            if not key:
                raise ValueError("Branch names must not be empty")
            if key in seen:
                raise ValueError(f"Duplicate branch name: {text}")
            seen.add(key)
            ordered.append(text)
        if not ordered:
            raise ValueError("Branch vocabulary must not be empty")
        self._names = tuple(ordered)
        self._keys = {branch_key(name): name for name in self._names}

    @classmethod
    def default(cls) -> "BranchVocabulary":
        return cls(DEFAULT_BRANCHES)

    def __getitem__(self, index):  # type: ignore[override]
        return self._names[index]

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and branch_key(name) in self._keys

    def __repr__(self) -> str:
        return f"BranchVocabulary({list(self._names)!r})"

    def canonical(self, name: str | None) -> str | None:
        """Return the vocabulary spelling of ``name``, or None when it is not a known branch."""
        return self._keys.get(branch_key(name))
