from __future__ import annotations

from spatial_nav import selectors
from spatial_nav.memory_host import InMemoryHost


def test_to_selector_variants() -> None:
    element = object()

    assert selectors.to_selector(".item") == selectors.Query(".item")
    assert selectors.to_selector("@menu") == selectors.Query("@menu")
    assert selectors.to_selector("@menu", extended=True) == selectors.SectionRef("menu")
    assert selectors.to_selector("@", extended=True) == selectors.DefaultSectionRef()
    assert selectors.to_selector([1, 2]) == selectors.Elements((1, 2))
    assert selectors.to_selector(None) == selectors.Elements(())
    assert selectors.to_selector(element).items[0] is element


def test_resolve_and_match_against_memory_host() -> None:
    host = InMemoryHost()
    a = host.add("a", (0, 0, 10, 10), classes=["item"])
    b = host.add("b", (20, 0, 10, 10), classes=["item", "wide"], tag="button")
    host.add("c", (40, 0, 10, 10))

    assert selectors.resolve(selectors.Query(".item"), host) == [a, b]
    assert selectors.resolve(selectors.Query("#c, button"), host) == [b, host["c"]]
    assert selectors.resolve(selectors.Query(""), host) == []
    assert selectors.resolve(selectors.SectionRef("menu"), host) == []
    assert selectors.matches(b, selectors.Query(".wide"), host)
    assert selectors.matches(a, selectors.Elements((a,)), host)
    assert not selectors.matches(a, selectors.Query(""), host)
    assert selectors.first(selectors.Query(".missing"), host) is None


def test_detached_elements_drop_out_of_queries() -> None:
    host = InMemoryHost()
    a = host.add("a", (0, 0, 10, 10), classes=["item"])
    host.focus(a)

    host.detach_element(a)

    assert host.query(".item") == []
    assert host.measure(a) is None
    assert not host.is_visible(a)
    assert host.current_focus() is None


def test_zero_sized_elements_are_not_visible() -> None:
    host = InMemoryHost()

    assert not host.is_visible(host.add("empty", (5, 5, 0, 0)))
    assert host.is_visible(host.add("line", (5, 5, 10, 0)))


def test_from_layout_builds_elements() -> None:
    host = InMemoryHost.from_layout(
        {"elements": [{"id": 1, "rect": [0, 0, 10, 10], "classes": ["x"], "attributes": {"data-sn-up": "#2"}}]}
    )

    element = host["1"]
    assert element.rect == (0.0, 0.0, 10.0, 10.0)
    assert host.direction_override(element, "up") == "#2"
    assert host.matches(element, ".x")
