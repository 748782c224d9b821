"""Row-aligned assignment of parameter slots.

Conventional parameterized runners take the cross-product of every slot's
candidate values. Here candidate ``i`` of every slot belongs to row ``i``,
so plan ``i`` is built from row ``i`` only::

    slots   id          kind
    row 0   4           journal   -> plan 0: (4, journal)
    row 1   1           ebook     -> plan 1: (1, ebook)

A slot with a single candidate (a fixed slot) is shared by every plan.
"""

from typing import List, Sequence

from rowdriven.logging_config import get_logger
from rowdriven.model import AssignmentPlan, ParameterSlot

logger = get_logger("runner")


def merge_candidates(
    plans: List[AssignmentPlan], slot: ParameterSlot, candidates: Sequence, template: AssignmentPlan
) -> List[AssignmentPlan]:
    """Merge one slot's candidates into the working plans, index by index."""
    if not candidates:
        return plans

    if not plans:
        return [template.with_value(slot.position, value) for value in candidates]

    if len(candidates) == 1:
        return [plan.with_value(slot.position, candidates[0]) for plan in plans]

    merged = [
        plan.with_value(slot.position, value)
        for plan, value in zip(plans, candidates)
    ]
    # Plans past the candidate list keep only what earlier slots gave them
    merged.extend(plans[len(candidates):])
    if len(candidates) > len(plans):
        # More rows than plans: the earlier slots were shared single values,
        # so the new plans start from the last plan's bindings.
        last = plans[-1]
        merged.extend(last.with_value(slot.position, value) for value in candidates[len(plans):])
    return merged


def build_plans(slots: Sequence[ParameterSlot], context) -> List[AssignmentPlan]:
    """Build one plan per active row, in row order.

    Slots are resolved in declaration order. With no data-bound slot exactly
    one plan is produced; data-bound slots over zero rows produce none.
    """
    template = AssignmentPlan.all_unassigned(slots)
    plans: List[AssignmentPlan] = []
    has_data_slot = any(slot.is_data_bound for slot in slots)

    pending = template
    while not pending.is_complete():
        slot = pending.next_unassigned()
        candidates = slot.potential_values(context)
        logger.debug(
            f"Slot '{slot.name}' ({slot.kind.value}) has {len(candidates)} candidate(s)",
            extra={"test_case": context.test_case, "slot": slot.name, "candidates": len(candidates)},
        )
        if slot.is_data_bound and not candidates:
            logger.warning(
                f"No rows for data-bound slot '{slot.name}' of test case '{context.test_case}'",
                extra={"test_case": context.test_case, "slot": slot.name},
            )
            return []
        plans = merge_candidates(plans, slot, candidates, template)
        pending = pending.assign_next(None)

    if not plans:
        if has_data_slot:
            return []
        # No slots at all: the test case still runs once without arguments
        plans = [template]

    incomplete = [plan for plan in plans if not plan.is_complete()]
    if incomplete:
        raise ValueError(f"Slots left unassigned for {context.test_case}: {incomplete[0]!r}")

    logger.debug(
        f"Built {len(plans)} assignment plan(s) for '{context.test_case}'",
        extra={"test_case": context.test_case, "plans": len(plans)},
    )
    return plans
