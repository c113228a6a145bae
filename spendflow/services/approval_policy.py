"""Approval policies compiled from stored approval rules.

A stored :class:`~spendflow.models.ApprovalRule` keeps its configuration as
loosely typed JSON. Before a decision is evaluated the applicable rule is
resolved for the expense category and compiled into exactly one of the policy
variants below, so the engine never has to interpret boolean/nullable field
combinations itself.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

DEFAULT_MIN_APPROVAL_PERCENT = 100.0


@dataclass(frozen=True)
class SequentialPolicy:
    """Approvers act one after another in list order."""

    approver_ids: Tuple[int, ...] = ()
    _positions: Dict[int, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for index, approver_id in enumerate(self.approver_ids):
            # first occurrence wins for duplicated approver ids
            self._positions.setdefault(approver_id, index)

    def position_of(self, approver_id: int) -> Optional[int]:
        return self._positions.get(approver_id)

    def next_after(self, approver_id: int) -> Optional[int]:
        """Return the approver following ``approver_id``, or None at/after the end."""
        position = self.position_of(approver_id)
        if position is None or position + 1 >= len(self.approver_ids):
            return None
        return self.approver_ids[position + 1]


@dataclass(frozen=True)
class PercentagePolicy:
    threshold: float = DEFAULT_MIN_APPROVAL_PERCENT
    approver_ids: Tuple[int, ...] = ()

    @property
    def total_approvers(self) -> int:
        return max(1, len(self.approver_ids))

    def is_met(self, approved_count: int) -> bool:
        return approved_count / self.total_approvers * 100 >= self.threshold


@dataclass(frozen=True)
class SpecificApproverPolicy:
    """Any listed approver approves outright; everyone else counts toward ``fallback``."""

    specific_ids: FrozenSet[int]
    fallback: PercentagePolicy


ApprovalPolicy = Union[SequentialPolicy, PercentagePolicy, SpecificApproverPolicy]

DEFAULT_POLICY = PercentagePolicy(threshold=DEFAULT_MIN_APPROVAL_PERCENT, approver_ids=())


def _as_user_id(value: Any) -> int:
    if isinstance(value, Mapping):
        value = value.get("id")
    return int(value)


def ordered_approver_ids(approvers: Optional[Iterable[Any]]) -> Tuple[int, ...]:
    """Return approver ids in list position order."""
    return tuple(_as_user_id(entry) for entry in (approvers or []))


def _rule_parts(rule: Any) -> Tuple[Mapping[str, Any], Iterable[Any]]:
    if isinstance(rule, Mapping):
        return rule.get("conditions") or {}, rule.get("approvers") or []
    return getattr(rule, "conditions", None) or {}, getattr(rule, "approvers", None) or []


def policy_from_rule(rule: Any) -> ApprovalPolicy:
    """Compile a stored rule (model instance, mapping, or policy) into a policy."""
    if rule is None:
        return DEFAULT_POLICY
    if isinstance(rule, (SequentialPolicy, PercentagePolicy, SpecificApproverPolicy)):
        return rule

    conditions, approvers = _rule_parts(rule)
    approver_ids = ordered_approver_ids(approvers)

    if conditions.get("is_sequential"):
        return SequentialPolicy(approver_ids=approver_ids)

    threshold = conditions.get("min_approval_percent")
    percentage = PercentagePolicy(
        threshold=float(DEFAULT_MIN_APPROVAL_PERCENT if threshold is None else threshold),
        approver_ids=approver_ids,
    )

    specific_ids = frozenset(_as_user_id(value) for value in conditions.get("specific_approver_ids") or [])
    if specific_ids:
        return SpecificApproverPolicy(specific_ids=specific_ids, fallback=percentage)
    return percentage


def _category_filter(rule: Any) -> Optional[str]:
    conditions, _ = _rule_parts(rule)
    return conditions.get("category_filter") or None


def resolve_rule(rules: Iterable[Any], category: Optional[str]) -> Optional[Any]:
    """Pick the rule that governs an expense category.

    An exact ``category_filter`` match wins; otherwise the first rule without a
    filter applies. Returns None when nothing applies, which callers treat as
    :data:`DEFAULT_POLICY`.
    """
    catch_all = None
    for rule in rules or []:
        category_filter = _category_filter(rule)
        if category_filter is None:
            if catch_all is None:
                catch_all = rule
        elif category_filter == category:
            return rule
    return catch_all
