"""Selector variants and the single dispatch that resolves them."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Sequence, Tuple, Union

if TYPE_CHECKING:
    from spatial_nav.host import NavigationHost


@dataclass(frozen=True)
class Query:
    """A host query string (``#id``, ``.class``, ...)."""

    text: str


@dataclass(frozen=True)
class Elements:
    """An explicit, ordered list of element handles."""

    items: Tuple[Any, ...]


@dataclass(frozen=True)
class SectionRef:
    """``@<section-id>``: the entry element of a section."""

    section_id: str


@dataclass(frozen=True)
class DefaultSectionRef:
    """``@``: the default section chain."""


Selector = Union[Query, Elements, SectionRef, DefaultSectionRef]
_SELECTOR_TYPES = (Query, Elements, SectionRef, DefaultSectionRef)


def to_selector(raw: Any, *, extended: bool = False) -> Selector:
    """Build a selector from a caller-supplied value.

    Strings are queries; with ``extended`` set, ``@`` and ``@id`` become
    section references. Lists and tuples become element lists; any other
    object is taken as a single element.
    """

    if isinstance(raw, _SELECTOR_TYPES):
        return raw
    if isinstance(raw, str):
        if extended and raw.startswith("@"):
            if len(raw) == 1:
                return DefaultSectionRef()
            return SectionRef(raw[1:])
        return Query(raw)
    if raw is None:
        return Elements(())
    if isinstance(raw, (list, tuple)):
        return Elements(tuple(raw))
    return Elements((raw,))


def resolve(selector: Selector, host: "NavigationHost") -> List[Any]:
    """Return the elements a plain selector designates, in host order.

    Section references have no element list of their own; callers that accept
    extended selectors handle them before resolving.
    """

    if isinstance(selector, Query):
        if not selector.text:
            return []
        return list(host.query(selector.text))
    if isinstance(selector, Elements):
        return list(selector.items)
    return []


def matches(element: Any, selector: Selector, host: "NavigationHost") -> bool:
    if isinstance(selector, Query):
        if not selector.text:
            return False
        return host.matches(element, selector.text)
    if isinstance(selector, Elements):
        return any(item is element for item in selector.items)
    return False


def first(selector: Selector, host: "NavigationHost") -> Any:
    found: Sequence[Any] = resolve(selector, host)
    return found[0] if found else None
