"""Priority-ordered plan queue.

Each agent keeps its goals as PlanRecords. Step generation and priority
scoring come from the oracle; this module only stores, orders and updates
them.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

from populace.clock import Clock
from populace.errors import InvalidArgument
from populace.ids import IdFactory, SequentialIds
from populace.schemas import NEUTRAL_SCORE, PLAN_STATUSES, PlanRecord, clamp_score


PriorityFn = Callable[[PlanRecord], float]


class PlanningQueue:
    """Goal records for one agent, ordered by priority.

    Only ``status`` (via ``set_status``) and ``priority`` (via
    ``reprioritize``) change after creation. Readers receive copies.
    """

    def __init__(self, clock: Clock, *, id_factory: Optional[IdFactory] = None) -> None:
        self.clock = clock
        self._id_factory = id_factory or SequentialIds("plan")
        self._plans: Dict[str, PlanRecord] = {}

    def __len__(self) -> int:
        return len(self._plans)

    def add(self, goal: str, steps: Sequence[str] = (), priority: float = NEUTRAL_SCORE) -> PlanRecord:
        """Create an active plan.

        Args:
            goal: Non-empty goal text
            steps: Ordered step descriptions
            priority: 0-10, clamped

        Returns:
            A copy of the stored PlanRecord

        Raises:
            InvalidArgument: If goal is blank
        """
        if not goal or not goal.strip():
            raise InvalidArgument("Plan goal must be a non-empty string")

        now = self.clock.now()
        plan = PlanRecord(
            id=self._id_factory(),
            goal=goal,
            steps=list(steps),
            status="active",
            priority=clamp_score(priority),
            created_at=now,
            updated_at=now,
            sequence=len(self._plans),
        )
        self._plans[plan.id] = plan
        return plan.model_copy(deep=True)

    def _active(self) -> List[PlanRecord]:
        plans = [plan for plan in self._plans.values() if plan.status == "active"]
        # Highest priority first; among equals the older goal surfaces first.
        plans.sort(key=lambda plan: (-plan.priority, plan.created_at, plan.sequence))
        return plans

    def active_plans(self) -> List[PlanRecord]:
        """Active plans, priority descending, ties by older ``created_at``."""
        return [plan.model_copy(deep=True) for plan in self._active()]

    def get(self, plan_id: str) -> Optional[PlanRecord]:
        plan = self._plans.get(plan_id)
        return plan.model_copy(deep=True) if plan is not None else None

    def all(self) -> List[PlanRecord]:
        """Every plan regardless of status, in creation order."""
        return [plan.model_copy(deep=True) for plan in self._plans.values()]

    def set_status(self, plan_id: str, status: str) -> bool:
        """Update a plan's status.

        Unknown ids are a silent no-op.

        Returns:
            True if a plan was updated

        Raises:
            InvalidArgument: If status is not active/completed/abandoned
        """
        if status not in PLAN_STATUSES:
            raise InvalidArgument(
                f"Unknown plan status '{status}' (expected one of {', '.join(PLAN_STATUSES)})"
            )
        plan = self._plans.get(plan_id)
        if plan is None:
            return False
        plan.status = status
        plan.updated_at = self.clock.now()
        return True

    def reprioritize(self, new_priority_fn: PriorityFn) -> int:
        """Recompute the priority of every active plan.

        ``new_priority_fn`` receives a copy of each plan so it cannot alter
        ids or steps. Results are clamped to 0-10.

        Returns:
            Number of plans updated
        """
        active = self._active()
        # All scores are computed before any plan changes.
        scores = [clamp_score(new_priority_fn(plan.model_copy(deep=True))) for plan in active]
        now = self.clock.now()
        for plan, score in zip(active, scores):
            plan.priority = score
            plan.updated_at = now
        return len(active)


__all__ = ["PlanningQueue", "PriorityFn"]
