"""
Ordered detection rules shared by the client and protocol classifiers.

A classifier is an ordered tuple of
[DetectionRule][dmchecker.nips.base.DetectionRule] objects. Each rule is a
pure function of the event and a context value (the already detected
client for protocol rules, ``None`` for client rules) returning a label or
``None``. [first_match()][dmchecker.nips.base.first_match] evaluates rules
in order and the first label wins; rule order encodes heuristic
confidence.

Rules must never abort a classification. An exception raised by a rule
(for example while inspecting an oddly shaped tag) is logged and the rule
counts as a non-match.

See Also:
    [dmchecker.nips.clients][]: Client detection rules.
    [dmchecker.nips.protocols][]: Protocol detection rules.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from dmchecker.core.logger import format_kv_pairs
from dmchecker.models.constants import UNKNOWN_LABEL
from dmchecker.models.event import RawEvent


logger = logging.getLogger(__name__)

ContextT = TypeVar("ContextT")


@dataclass(frozen=True, slots=True)
class DetectionRule(Generic[ContextT]):
    """A named heuristic mapping an event to a label or ``None``.

    Attributes:
        name: Identifier used in trace output and tests.
        detect: Pure function ``(event, context) -> label | None``.
    """

    name: str
    detect: Callable[[RawEvent, ContextT], str | None]

    def __call__(self, event: RawEvent, context: ContextT) -> str | None:
        return self.detect(event, context)


def first_match(
    rules: Sequence[DetectionRule[ContextT]],
    event: RawEvent,
    context: ContextT,
    *,
    kind: str,
    default: str = UNKNOWN_LABEL,
) -> str:
    """Evaluate ``rules`` in order and return the first label produced.

    Args:
        rules: Ordered rules; earlier rules take precedence.
        event: Event being classified.
        context: Value passed to every rule.
        kind: What is being detected (``"client"``, ``"protocol"``), used
            in trace output.
        default: Label returned when no rule matches.

    Returns:
        The first non-empty label, or ``default``.
    """
    _trace("detection_started", kind=kind, event=event.short_id, tags=len(event.tags))

    for rule in rules:
        try:
            label = rule(event, context)
        except (TypeError, AttributeError, IndexError, ValueError) as e:
            logger.warning(
                "rule_failed%s",
                format_kv_pairs({"kind": kind, "rule": rule.name, "event": event.short_id, "error": e}),
            )
            continue

        if label:
            _trace("rule_matched", kind=kind, rule=rule.name, event=event.short_id, label=label)
            return label
        _trace("rule_skipped", kind=kind, rule=rule.name, event=event.short_id)

    _trace("no_rule_matched", kind=kind, event=event.short_id, label=default)
    return default


def _trace(message: str, **kwargs: object) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("%s%s", message, format_kv_pairs(kwargs))
