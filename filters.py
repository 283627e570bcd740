from typing import Iterable, List

from models import Alert, RuleGroup


def filter_rule_groups(groups: Iterable[RuleGroup], label: str, value: str) -> List[RuleGroup]:
    """
    Keep the rules carrying the (label, value) pair.

    Groups left without rules are dropped. Order is preserved and the
    input groups are not modified; kept rules are shared with them.
    """
    filtered: List[RuleGroup] = []
    for group in groups:
        rules = [rule for rule in group.rules if rule.labels().has(label, value)]
        if rules:
            filtered.append(group.model_copy(update={"rules": rules}))
    return filtered


def filter_alerts(alerts: Iterable[Alert], label: str, value: str) -> List[Alert]:
    return [alert for alert in alerts if alert.labels.has(label, value)]
