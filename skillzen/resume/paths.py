"""Priority-ordered field lookups over loosely-typed vendor JSON."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

Transform = Callable[[Any], Any]


def dig(data: Any, path: str) -> Any:
    """Follow a dotted key path through nested mappings; missing steps yield None."""
    if not path:
        return data
    current = data
    for key in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def as_text(value: Any) -> str | None:
    """Scalars become trimmed strings; containers and empty strings are absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, (str, int, float)):
        text = str(value).strip()
        return text or None
    return None


def as_joined_text(value: Any) -> str | None:
    """Like as_text, but a list of scalars is joined into one line."""
    if isinstance(value, list):
        parts = [as_text(item) for item in value]
        joined = " ".join(part for part in parts if part)
        return joined or None
    return as_text(value)


def as_list(value: Any) -> list[Any] | None:
    if isinstance(value, list) and value:
        return value
    return None


def is_present(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, dict)):
        return bool(value)
    return True


@dataclass(frozen=True)
class Candidate:
    path: str
    transform: Transform = as_text

    def resolve(self, data: Any) -> Any:
        return self.transform(dig(data, self.path))


def candidates(*paths: str, transform: Transform = as_text) -> tuple[Candidate, ...]:
    return tuple(Candidate(path, transform) for path in paths)


def first_present(data: Any, lookups: Sequence[Candidate], default: Any = None) -> Any:
    for candidate in lookups:
        value = candidate.resolve(data)
        if value is not None:
            return value
    return default


def date_range(start_key: str, end_key: str) -> Transform:
    """Compose '<start> - <end>' from an entry, with 'Present' for an open end."""

    def compose(entry: Any) -> str | None:
        if not isinstance(entry, dict):
            return None
        start = as_text(entry.get(start_key))
        if start is None:
            return None
        end = as_text(entry.get(end_key)) or "Present"
        return f"{start} - {end}"

    return compose


def label_of(item: Any, keys: Sequence[str] = ("name", "skill", "title", "label")) -> str:
    """String form of a list entry: strings as-is, else the first known label key."""
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, dict):
        for key in keys:
            text = as_text(item.get(key))
            if text:
                return text
    text = as_text(item)
    if text is not None:
        return text
    return str(item).strip()
