"""
Work order stage table.

A work order moves through a fixed, ordered list of stages. Two of them
(marking, coating) only exist for orders whose flag asks for them. Everything
the service needs to decide whether a stage may be completed, and what status
the order ends up in, is read from STAGES below.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from django.db import models

from configurations.base_features.constants import ROLE_ADMIN, ROLE_MANAGER, ROLE_OPERATOR
from work_orders.exceptions import (
    PreviousStageIncompleteError,
    StageAlreadyCompletedError,
    StageNotApplicableError,
    StageNotAuthorizedError,
    WorkOrderClosedError,
)


class WorkOrderStatus(models.TextChoices):
    PLANNING_REQUIRED = 'Planning Required'
    PLANNING_DONE = 'Planning Done'
    QUALITY_DONE = 'Quality Done'
    PARTIALLY_ACCEPTED = 'Partially Accepted'
    MARKING_DONE = 'Marking Done'
    AT_COATING = 'At Coating'
    COATING_DONE = 'Coating Done'
    READY_FOR_DISPATCH = 'Ready for Dispatch'
    DISPATCHED = 'Dispatched'
    REJECTED = 'Rejected'


TERMINAL_STATUSES = (WorkOrderStatus.DISPATCHED, WorkOrderStatus.REJECTED)
# labels older order imports use for finished work
LEGACY_CLOSED_STATUSES = ('completed', 'done', 'closed', 'released')

SUPERVISOR_ROLES = (ROLE_ADMIN, ROLE_MANAGER)
QUALITY_ROLES = SUPERVISOR_ROLES


@dataclass(frozen=True)
class Stage:
    key: str
    label: str
    completion_status: str
    roles: Tuple[str, ...] = SUPERVISOR_ROLES
    condition: Optional[str] = None
    notes_field: Optional[str] = None

    @property
    def at_field(self):
        return f"{self.key}_at"

    @property
    def by_field(self):
        return f"{self.key}_by"

    def applies_to(self, work_order) -> bool:
        return self.condition is None or bool(getattr(work_order, self.condition))

    def is_complete(self, work_order) -> bool:
        return getattr(work_order, self.at_field) is not None

    def allows(self, role) -> bool:
        return role in self.roles


STAGES = (
    Stage('factory_planning', 'Factory Planning', WorkOrderStatus.PLANNING_DONE,
          notes_field='factory_planning_notes'),
    Stage('production_completed', 'Production', WorkOrderStatus.QUALITY_DONE,
          notes_field='production_notes'),
    Stage('marking_completed', 'Marking', WorkOrderStatus.MARKING_DONE,
          roles=(ROLE_ADMIN, ROLE_MANAGER, ROLE_OPERATOR), condition='marking_required',
          notes_field='marking_notes'),
    Stage('sent_to_coating', 'Sent to Coating', WorkOrderStatus.AT_COATING,
          condition='coating_required', notes_field='coating_notes'),
    Stage('coating_completed', 'Coating Done', WorkOrderStatus.COATING_DONE,
          condition='coating_required', notes_field='coating_notes'),
    Stage('ready_for_dispatch', 'Ready for Dispatch', WorkOrderStatus.READY_FOR_DISPATCH,
          notes_field='dispatch_notes'),
    Stage('dispatched', 'Dispatched', WorkOrderStatus.DISPATCHED,
          notes_field='dispatch_notes'),
)
STAGES_BY_KEY = {stage.key: stage for stage in STAGES}
STAGE_CHOICES = [(stage.key, stage.label) for stage in STAGES]

MARKING_STAGE = STAGES_BY_KEY['marking_completed']
READY_FOR_DISPATCH_STAGE = STAGES_BY_KEY['ready_for_dispatch']


@dataclass
class StageTransition:
    """Outcome of a permitted stage completion."""
    stage: Stage
    next_status: str
    # stages completed together with `stage`, in sequence order
    also_completes: List[Stage] = field(default_factory=list)

    @property
    def completed_stages(self):
        return [self.stage, *self.also_completes]


def active_stages(work_order) -> List[Stage]:
    """The stage sequence for this order, with conditional stages filtered by its flags."""
    return [stage for stage in STAGES if stage.applies_to(work_order)]


def is_work_order_open(status) -> bool:
    if not status:
        return True
    if status in TERMINAL_STATUSES:
        return False
    return str(status).strip().lower() not in LEGACY_CLOSED_STATUSES


def derive_status(work_order, completed_keys=()) -> str:
    """
    Status implied by the furthest completed stage of the order's sequence.
    `completed_keys` lets a caller evaluate stages it is about to complete.
    """
    status = WorkOrderStatus.PLANNING_REQUIRED
    for stage in active_stages(work_order):
        if stage.is_complete(work_order) or stage.key in completed_keys:
            status = stage.completion_status
    return status


def previous_stage(work_order, stage: Stage) -> Optional[Stage]:
    sequence = active_stages(work_order)
    index = sequence.index(stage)
    return sequence[index - 1] if index else None


def plan_stage_completion(work_order, stage_key, role) -> StageTransition:
    """
    Decide whether `role` may complete `stage_key` on `work_order` now.

    Returns the transition to apply or raises the lifecycle error that
    blocks it. The work order is not modified.
    """
    stage = STAGES_BY_KEY.get(stage_key)
    if stage is None:
        raise StageNotApplicableError(stage_key, work_order.work_order_no)
    if not is_work_order_open(work_order.status):
        raise WorkOrderClosedError(work_order.work_order_no, work_order.status)
    if not stage.applies_to(work_order):
        raise StageNotApplicableError(stage.key, work_order.work_order_no)
    if not stage.allows(role):
        raise StageNotAuthorizedError(stage.key, role)
    if stage.is_complete(work_order):
        raise StageAlreadyCompletedError(stage.key, work_order.work_order_no)
    before = previous_stage(work_order, stage)
    if before is not None and not before.is_complete(work_order):
        raise PreviousStageIncompleteError(stage.key, before.key)

    also_completes = []
    if stage is MARKING_STAGE and _marking_releases_dispatch(work_order):
        also_completes.append(READY_FOR_DISPATCH_STAGE)

    completed_keys = [stage.key] + [extra.key for extra in also_completes]
    return StageTransition(
        stage=stage,
        next_status=derive_status(work_order, completed_keys),
        also_completes=also_completes,
    )


def _marking_releases_dispatch(work_order) -> bool:
    # marking hands the order straight to dispatch once nothing else sits in between.
    # the legacy dashboard also did this with coating pending; here coating must finish first
    if READY_FOR_DISPATCH_STAGE.is_complete(work_order):
        return False
    for stage in active_stages(work_order):
        if stage is READY_FOR_DISPATCH_STAGE:
            return True
        if stage is not MARKING_STAGE and not stage.is_complete(work_order):
            return False
    return False


def can_complete(work_order, stage: Stage, role) -> bool:
    try:
        plan_stage_completion(work_order, stage.key, role)
    except (StageNotApplicableError, StageNotAuthorizedError, StageAlreadyCompletedError,
            PreviousStageIncompleteError, WorkOrderClosedError):
        return False
    return True


# fields the stage sequence and quantity split depend on
LOCKED_FIELDS = ('work_order_no', 'quantity', 'coating_required', 'marking_required')


def has_lifecycle_progress(work_order) -> bool:
    """True once any stage or quality decision is recorded, or the order is closed."""
    if not is_work_order_open(work_order.status):
        return True
    if any(stage.is_complete(work_order) for stage in STAGES):
        return True
    return bool(work_order.quality_accepted_at or work_order.quality_rejected_at)
