"""
Embedded task lifecycle: add, update and delete entries in a user's `tasks` array.

The array lives inside the user document, so every mutation is a
read-modify-write of the whole list. Writes are compare-and-set on the
document's `version` counter and retried on conflict, so two callers editing
different tasks of the same user cannot silently overwrite each other.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import config
from constants import SELF_ASSIGNER, TaskStatus
from errors import ConflictError, NotFoundError
from logging_config import get_logger
from models.task import TaskCreateModel, TaskEntryModel, TaskUpdateModel

logger = get_logger("task_lifecycle")

# Update fields where a falsy value means "keep what was there"
KEEP_ON_FALSY = {
    "task_name": "taskName",
    "project": "project",
    "assigned_by": "AssignedBy",
    "start_date": "startDate",
    "end_date": "endDate",
    "status": "status",
}


@dataclass
class CompletionNotice:
    """Everything the dispatcher needs once a task has flipped to completed."""
    completed_by_id: str
    completed_by_name: str
    assigner_name: str
    assigner_id: Optional[str]
    employee_id: str
    task_id: str
    task_name: str
    project: str


def normalize_tasks(tasks: Optional[List[dict]]) -> Tuple[List[dict], bool]:
    """
    Give every entry a string `id`. Legacy entries that only carry a native
    `_id` take its string form. Returns (tasks, changed).
    """
    normalized = []
    changed = False
    for task in tasks or []:
        if not task.get("id"):
            legacy_id = task.get("_id")
            task = {k: v for k, v in task.items() if k != "_id"}
            task["id"] = str(legacy_id) if legacy_id is not None else str(uuid.uuid4())
            changed = True
        normalized.append(task)
    return normalized, changed


def _index_of(tasks: List[dict], task_id: str) -> int:
    for i, task in enumerate(tasks):
        if task.get("id") == task_id:
            return i
    raise NotFoundError("Task not found")


async def _write_tasks(db, user_id: str, mutate: Callable[[List[dict]], Tuple[List[dict], Any]]):
    """
    Apply `mutate` to the user's task list and persist it under a version check.
    Returns (user_doc_as_read, mutate_result).
    """
    for attempt in range(1, config.TASK_WRITE_RETRIES + 1):
        user = await db.users.find_one({"id": user_id})
        if not user:
            raise NotFoundError("User not found")

        tasks, _ = normalize_tasks(user.get("tasks"))
        new_tasks, result = mutate(tasks)

        # Documents written before versioning have no counter yet
        version_filter = user["version"] if "version" in user else {"$exists": False}
        write = await db.users.update_one(
            {"id": user_id, "version": version_filter},
            {"$set": {"tasks": new_tasks, "updated_at": datetime.now()}, "$inc": {"version": 1}}
        )
        if write.matched_count == 1:
            return user, result

        logger.warning(
            "Task list write conflict, retrying",
            extra={"data": {"user_id": user_id, "attempt": attempt}}
        )

    logger.error("Task list write gave up after retries", extra={"data": {"user_id": user_id}})
    raise ConflictError("Task list was modified concurrently, please retry")


async def add_task(db, owner_id: str, data: TaskCreateModel, assigned_by_id: Optional[str] = None) -> Dict[str, Any]:
    """Append a new entry to the owner's task list and return it."""
    entry = TaskEntryModel(
        task_name=data.task_name,
        project=data.project or "",
        assigned_by=data.assigned_by or SELF_ASSIGNER,
        assigned_by_id=assigned_by_id,
        start_date=data.start_date or datetime.now(),
        end_date=data.end_date,
        remark=data.remark or "",
        status=data.status or TaskStatus.PENDING,
    ).model_dump(by_alias=True)

    def mutate(tasks):
        existing = {t["id"] for t in tasks}
        while entry["id"] in existing:
            entry["id"] = str(uuid.uuid4())
        return tasks + [entry], entry

    _, created = await _write_tasks(db, owner_id, mutate)
    logger.info("Task added", extra={"data": {"owner_id": owner_id, "task_id": created["id"], "assigned_by": created["AssignedBy"]}})
    return created


def apply_task_update(current: dict, changes: TaskUpdateModel) -> dict:
    updated = dict(current)
    for field, key in KEEP_ON_FALSY.items():
        value = getattr(changes, field)
        if value:
            updated[key] = value

    if "remark" in changes.model_fields_set:
        updated["remark"] = changes.remark if changes.remark is not None else ""

    # A relabelled assigner no longer matches the stored reference
    if updated.get("AssignedBy") != current.get("AssignedBy"):
        updated["assignedById"] = None
    return updated


def completion_notice_for(prior: dict, updated: dict, owner_id: str, completed_by_id: str, completed_by_name: str) -> Optional[CompletionNotice]:
    """Decide whether this transition owes the assigner a completion notice."""
    if updated.get("status") != TaskStatus.COMPLETED:
        return None
    if prior.get("status") == TaskStatus.COMPLETED:
        return None

    assigner = updated.get("AssignedBy")
    if not assigner or assigner == SELF_ASSIGNER:
        return None

    return CompletionNotice(
        completed_by_id=completed_by_id,
        completed_by_name=completed_by_name,
        assigner_name=assigner,
        assigner_id=updated.get("assignedById"),
        employee_id=owner_id,
        task_id=updated["id"],
        task_name=updated.get("taskName") or "",
        project=updated.get("project") or "",
    )


async def update_task(
    db,
    owner_id: str,
    task_id: str,
    changes: TaskUpdateModel,
    completed_by_id: str,
    completed_by_name: str,
) -> Tuple[dict, Optional[CompletionNotice]]:
    """
    Partially update one entry. Returns the updated entry and, when the status
    just became completed, the notice the caller should dispatch after the
    write has committed.
    """
    def mutate(tasks):
        i = _index_of(tasks, task_id)
        prior = tasks[i]
        updated = apply_task_update(prior, changes)
        return tasks[:i] + [updated] + tasks[i + 1:], (prior, updated)

    _, (prior, updated) = await _write_tasks(db, owner_id, mutate)
    logger.info(
        "Task updated",
        extra={"data": {"owner_id": owner_id, "task_id": task_id, "status": f"{prior.get('status')} -> {updated.get('status')}"}}
    )
    notice = completion_notice_for(prior, updated, owner_id, completed_by_id, completed_by_name)
    return updated, notice


async def delete_task(db, owner_id: str, task_id: str) -> dict:
    """Remove one entry and return it."""
    def mutate(tasks):
        i = _index_of(tasks, task_id)
        return tasks[:i] + tasks[i + 1:], tasks[i]

    _, removed = await _write_tasks(db, owner_id, mutate)
    logger.info("Task deleted", extra={"data": {"owner_id": owner_id, "task_id": task_id}})
    return removed


async def fix_task_ids(db) -> int:
    """Persist `normalize_tasks` for every user holding legacy entries. Returns users fixed."""
    fixed = 0
    async for user in db.users.find({"tasks": {"$exists": True, "$ne": []}}):
        tasks, changed = normalize_tasks(user.get("tasks"))
        if not changed:
            continue
        version_filter = user["version"] if "version" in user else {"$exists": False}
        write = await db.users.update_one(
            {"id": user["id"], "version": version_filter},
            {"$set": {"tasks": tasks, "updated_at": datetime.now()}, "$inc": {"version": 1}}
        )
        if write.matched_count == 1:
            fixed += 1
        else:
            # Someone else wrote first; their write already normalized the list
            logger.info("Skipped legacy id fix after concurrent write", extra={"data": {"user_id": user["id"]}})
    logger.info("Legacy task ids normalized", extra={"data": {"users_fixed": fixed}})
    return fixed
