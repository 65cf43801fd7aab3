from __future__ import annotations

from types import SimpleNamespace

import pytest

from rulematch.engine import Matcher
from rulematch.errors import InvalidArgument, InvalidState
from rulematch.models import Computed, Fixed
from rulematch.rule import Rule


def test_end_to_end_status_rule():
    matcher = Matcher()
    matcher.when_property("status").equals("active").provide({"visible": True})

    assert matcher.match(SimpleNamespace(status="active")) == [{"visible": True}]
    assert matcher.match(SimpleNamespace(status="inactive")) == []


def test_matches_in_registration_order_without_unique_fields():
    matcher = Matcher()
    matcher.when_property("status").equals("active").provide({"id": 1, "name": "first"})
    matcher.when_property("status").starts_with("act").provide({"id": 1, "name": "second"})
    matcher.when_property("status").equals("closed").provide({"id": 2})

    assert matcher.match(SimpleNamespace(status="active")) == [
        {"id": 1, "name": "first"},
        {"id": 1, "name": "second"},
    ]


@pytest.mark.parametrize("candidate", [None, 3, "obj", [SimpleNamespace()]])
def test_non_object_candidate_raises(candidate):
    matcher = Matcher()
    matcher.when_property("status").equals("active")
    with pytest.raises(InvalidArgument):
        matcher.match(candidate)


def test_matcher_tags_gate_everything():
    matcher = Matcher().set_tags({"a", "b"})
    matcher.when_property("status").equals("active").provide({"visible": True})
    obj = SimpleNamespace(status="active")

    assert matcher.match(obj, "c") == []
    assert matcher.match(obj, "a") == [{"visible": True}]
    assert matcher.match(obj) == [{"visible": True}]


def test_tag_gate_is_checked_before_rules():
    matcher = Matcher().set_tags(["a"])
    # Would raise InvalidState if evaluated
    matcher.when_property("status")
    assert matcher.match(SimpleNamespace(status="active"), "c") == []


def test_rule_tags_filter_individual_rules():
    matcher = Matcher()
    matcher.when_property("status").equals("active").provide({"public": True})
    matcher.when_property("status").equals("active").add_tag("admin").provide({"admin": True})
    obj = SimpleNamespace(status="active")

    assert matcher.match(obj, "guest") == [{"public": True}]
    assert matcher.match(obj, "admin") == [{"public": True}, {"admin": True}]


def test_unique_fields_merge_last_writer_wins():
    matcher = Matcher().set_unique_fields(["id"])
    matcher.when_property("status").equals("active").provide({"id": 1, "name": "x", "color": "blue"})
    matcher.when_property("status").equals("active").provide({"id": 1, "color": "red"})

    assert matcher.match(SimpleNamespace(status="active")) == [{"id": 1, "name": "x", "color": "red"}]


def test_unique_mode_keeps_first_insertion_order():
    matcher = Matcher().set_unique_fields(["id", "kind"])
    matcher.when_property("status").equals("active").provide({"id": 1, "kind": "a", "n": 1})
    matcher.when_property("status").equals("active").provide({"id": 2, "kind": "a", "n": 2})
    matcher.when_property("status").equals("active").provide({"id": 1, "kind": "a", "n": 3})

    assert matcher.match(SimpleNamespace(status="active")) == [
        {"id": 1, "kind": "a", "n": 3},
        {"id": 2, "kind": "a", "n": 2},
    ]


def test_missing_unique_fields_share_an_empty_key():
    matcher = Matcher().set_unique_fields(["id"])
    matcher.when_property("status").equals("active").provide({"name": "x"})
    matcher.when_property("status").equals("active").provide({"color": "red"})

    assert matcher.match(SimpleNamespace(status="active")) == [{"name": "x", "color": "red"}]


def test_rule_payload_wins_over_defaults():
    matcher = Matcher().set_defaults({"priority": 0, "source": "rules"})
    matcher.when_property("status").equals("active").provide({"priority": 5})

    assert matcher.match(SimpleNamespace(status="active")) == [{"priority": 5, "source": "rules"}]


def test_computed_default_runs_once_per_match_call():
    calls = []

    def double_id(obj):
        calls.append(obj)
        return obj.id * 2

    matcher = Matcher().set_default("double", double_id)
    matcher.when_property("status").equals("active").provide({"a": 1})
    matcher.when_property("status").equals("active").provide({"b": 2})

    obj = SimpleNamespace(id=21, status="active")
    assert matcher.match(obj) == [{"double": 42, "a": 1}, {"double": 42, "b": 2}]
    assert len(calls) == 1

    matcher.match(obj)
    assert len(calls) == 2


def test_computed_default_not_called_without_matches():
    calls = []
    matcher = Matcher().set_default("x", lambda obj: calls.append(obj))
    matcher.when_property("status").equals("active").provide({"a": 1})

    assert matcher.match(SimpleNamespace(status="closed")) == []
    assert calls == []


def test_defaults_are_wrapped():
    matcher = Matcher().set_defaults({"priority": 0, "wrapped": Fixed(len)})
    func = lambda obj: 1  # noqa: E731
    matcher.set_default("computed", func)

    assert matcher.get_defaults() == {
        "priority": Fixed(0),
        "wrapped": Fixed(len),
        "computed": Computed(func),
    }


def test_fixed_callable_default_is_not_called():
    matcher = Matcher().set_defaults({"handler": Fixed(len)})
    matcher.when_property("status").equals("active")

    assert matcher.match(SimpleNamespace(status="active")) == [{"handler": len}]


def test_when_method_and_when_class():
    class Page:
        def slug(self):
            return "about-us"

    matcher = Matcher()
    matcher.when_method("slug").ends_with("-us").provide({"menu": "footer"})
    matcher.when_class(Page).set_target_method("slug").contains("about").provide({"menu": "main"})

    assert matcher.match(Page()) == [{"menu": "footer"}, {"menu": "main"}]
    assert matcher.match(SimpleNamespace(slug=lambda: "about-us")) == [{"menu": "footer"}]


def test_rule_without_value_propagates_invalid_state():
    matcher = Matcher()
    matcher.when_property("status")
    with pytest.raises(InvalidState):
        matcher.match(SimpleNamespace(status="active"))


def test_rule_factory_is_used():
    created = []

    class TracingRule(Rule):
        pass

    def factory():
        rule = TracingRule()
        created.append(rule)
        return rule

    matcher = Matcher(rule_factory=factory)
    rule = matcher.when_property("status")
    matcher.add_rules([{"property": "status", "equals": "x"}])

    assert len(created) == 2
    assert created[0] is rule
    assert matcher.rules == tuple(created)


def test_add_rule_registers_existing_rule():
    matcher = Matcher()
    rule = Rule().set_target_property("status").equals("active").provide({"ok": True})

    assert matcher.add_rule(rule) is rule
    assert matcher.match({"status": "active"}) == [{"ok": True}]


def test_match_many_preserves_order():
    matcher = Matcher()
    matcher.when_property("n").equals(2).provide({"two": True})

    assert matcher.match_many([{"n": 1}, {"n": 2}, {"n": "2"}]) == [[], [{"two": True}], [{"two": True}]]


def test_match_results_are_independent_copies():
    matcher = Matcher().set_defaults({"priority": 0})
    matcher.when_property("status").equals("active").provide({"visible": True})

    first = matcher.match(SimpleNamespace(status="active"))
    first[0]["visible"] = False
    assert matcher.match(SimpleNamespace(status="active")) == [{"priority": 0, "visible": True}]


def test_class_default_is_attached_not_called():
    matcher = Matcher().set_defaults({"kind": str})
    matcher.set_default("label", lambda obj: obj.status.title())
    matcher.when_property("status").equals("active")

    assert matcher.get_defaults()["kind"] == Fixed(str)
    assert matcher.match(SimpleNamespace(status="active")) == [{"kind": str, "label": "Active"}]
