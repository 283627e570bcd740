from filters import filter_alerts, filter_rule_groups
from models import AlertsData, RulesData


def _rule(name, tenant, kind="recording"):
    body = {
        "type": kind,
        "name": name,
        "query": "up",
        "labels": [{"name": "tenant", "value": tenant}],
        "health": "ok",
    }
    if kind == "alerting":
        body.update({"duration": 0, "annotations": [], "alerts": []})
    return body


def _groups(*groups):
    return RulesData.model_validate(
        {
            "groups": [
                {"name": name, "file": "rules.yml", "interval": 10, "rules": rules}
                for name, rules in groups
            ]
        }
    ).groups


def _alert(tenant, name="Down"):
    return {
        "labels": [{"name": "alertname", "value": name}, {"name": "tenant", "value": tenant}],
        "annotations": [],
        "state": "firing",
        "value": "1",
    }


def test_keeps_only_matching_rules():
    """Only rules with the tenant pair survive"""
    groups = _groups(
        ("g1", [_rule("r1", "a", "alerting"), _rule("r2", "b"), _rule("r3", "a")]),
    )

    filtered = filter_rule_groups(groups, "tenant", "a")

    assert [g.name for g in filtered] == ["g1"]
    assert [r.root.name for r in filtered[0].rules] == ["r1", "r3"]


def test_drops_groups_without_matches_and_keeps_order():
    """Empty groups vanish, order is kept"""
    groups = _groups(
        ("g1", [_rule("r1", "a")]),
        ("g2", [_rule("r2", "b")]),
        ("g3", [_rule("r3", "b"), _rule("r4", "a")]),
    )

    filtered = filter_rule_groups(groups, "tenant", "a")

    assert [g.name for g in filtered] == ["g1", "g3"]
    assert [r.root.name for r in filtered[1].rules] == ["r4"]


def test_does_not_modify_input_groups():
    """Filtering leaves the decoded groups intact"""
    groups = _groups(("g1", [_rule("r1", "a"), _rule("r2", "b")]))

    filter_rule_groups(groups, "tenant", "a")

    assert [r.root.name for r in groups[0].rules] == ["r1", "r2"]


def test_no_match_yields_empty_list():
    """No match gives an empty list, never None"""
    groups = _groups(("g1", [_rule("r1", "a")]))

    assert filter_rule_groups(groups, "tenant", "zzz") == []
    assert filter_rule_groups([], "tenant", "a") == []


def test_label_name_and_value_must_both_match():
    """Name and value must match on the same pair"""
    groups = _groups(("g1", [_rule("r1", "a")]))

    assert filter_rule_groups(groups, "team", "a") == []
    assert filter_rule_groups(groups, "tenant", "A") == []


def test_object_form_labels_are_matched():
    """Object-form labels filter like list-form ones"""
    groups = RulesData.model_validate(
        {
            "groups": [
                {
                    "name": "g1",
                    "file": "f",
                    "interval": 10,
                    "rules": [
                        {"type": "recording", "name": "r1", "query": "up",
                         "labels": {"tenant": "a"}, "health": "ok"},
                        {"type": "recording", "name": "r2", "query": "up",
                         "labels": {"tenant": "b"}, "health": "ok"},
                    ],
                }
            ]
        }
    ).groups

    filtered = filter_rule_groups(groups, "tenant", "b")

    assert [r.root.name for r in filtered[0].rules] == ["r2"]


def test_filter_alerts():
    """Flat alert list is filtered in order"""
    alerts = AlertsData.model_validate(
        {"alerts": [_alert("a", "A1"), _alert("b", "B1"), _alert("a", "A2")]}
    ).alerts

    filtered = filter_alerts(alerts, "tenant", "a")

    assert [dict(a.labels)["alertname"] for a in filtered] == ["A1", "A2"]
    assert filter_alerts(alerts, "tenant", "c") == []
