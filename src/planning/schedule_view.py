from __future__ import annotations

import logging
from typing import List

from pydantic import Field

from api.metrics import ORPHANED_SUBTASKS_TOTAL
from llm.schemas import GeneratedSchedule, MainTask, Subtask
from mailcraft.models import CamelModel

logger = logging.getLogger(__name__)


class ScheduleSection(CamelModel):
    main_task: MainTask
    subtasks: List[Subtask] = Field(default_factory=list)


class ScheduleView(CamelModel):
    sections: List[ScheduleSection] = Field(default_factory=list)
    # subtasks whose main_task_name matched no main task
    orphaned_subtasks: List[Subtask] = Field(default_factory=list)


def build_schedule_view(schedule: GeneratedSchedule) -> ScheduleView:
    """Group subtasks under their main task by exact name, highest priority first."""
    ordered = schedule.sorted_by_priority().main_tasks
    names = {t.name for t in ordered}

    sections = [
        ScheduleSection(
            main_task=task,
            subtasks=[s for s in schedule.subtasks if s.main_task_name == task.name],
        )
        for task in ordered
    ]
    orphans = [s for s in schedule.subtasks if s.main_task_name not in names]
    if orphans:
        ORPHANED_SUBTASKS_TOTAL.inc(len(orphans))
        logger.warning(
            f"{len(orphans)} subtask(s) reference unknown main tasks: "
            f"{sorted({s.main_task_name or '' for s in orphans})}"
        )

    return ScheduleView(sections=sections, orphaned_subtasks=orphans)
