"""Per-group repository operations for an assignment.

For every group of the assignment the gate either skips it with a recorded
reason or asks the platform to act on its repository. A failure for one
repository is recorded and never stops its siblings.
"""
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

from repomanage.backends.base import RepoError
from repomanage.backends.exceptions import RepositoryNotFound
from repomanage.exceptions import AssignmentNotFound
from repomanage.roster.resolution import active_member_ids, resolve_assignment_groups
from repomanage.roster.slug import DEFAULT_REPO_TEMPLATE, compute_repo_name, slugify

logger = logging.getLogger(__name__)


class RepoOperation(Enum):
    create = "create"
    clone = "clone"
    delete = "delete"


class SkipReason(Enum):
    blocked = "blocked"
    empty_group = "empty_group"
    repo_exists = "repo_exists"
    repo_not_found = "repo_not_found"
    directory_exists = "directory_exists"
    cancelled = "cancelled"


class CloneLayout(Enum):
    flat = "flat"
    by_group = "by-group"
    by_assignment = "by-assignment"


class SkippedGroup:
    def __init__(self, group_id, group_name, reason, context=None):
        self.group_id = group_id
        self.group_name = group_name
        self.reason = reason
        self.context = context

    def to_dict(self):
        data = {"group-id": self.group_id, "group-name": self.group_name,
                "reason": self.reason.value}
        if self.context is not None:
            data["context"] = self.context
        return data

    def __repr__(self):
        return "SkippedGroup({!r}, {})".format(self.group_name, self.reason.value)


class OperationError:
    def __init__(self, repo_name, message):
        self.repo_name = repo_name
        self.message = message

    def to_dict(self):
        return {"repo-name": self.repo_name, "message": self.message}

    def __repr__(self):
        return "OperationError({!r}, {!r})".format(self.repo_name, self.message)


class OperationResult:
    def __init__(self):
        self.succeeded = 0
        self.failed = 0
        self.skipped_groups = []
        self.errors = []

    @property
    def is_success(self):
        """Skipped groups count against success; they are never silent."""
        return self.failed == 0 and not self.skipped_groups

    def to_dict(self):
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped-groups": [s.to_dict() for s in self.skipped_groups],
            "errors": [e.to_dict() for e in self.errors],
        }


class RepoCollision:
    """A group whose repository would be skipped by an operation."""

    def __init__(self, group_id, group_name, repo_name, reason):
        self.group_id = group_id
        self.group_name = group_name
        self.repo_name = repo_name
        self.reason = reason

    def __repr__(self):
        return "RepoCollision({!r}, {})".format(self.repo_name, self.reason.value)


def blocked_groups(roster, groups, validation):
    """Map group ids to the names of blocking issue kinds that affect them.

    Group issues name their groups directly; a member issue blocks every
    group containing that member.
    """
    blocked = {}
    if validation is None:
        return blocked

    for issue in validation.blocking_issues():
        if issue.kind.affects_groups:
            targets = [g.id for g in groups if g.id in issue.affected_ids]
        else:
            targets = [g.id for g in groups
                       if any(mid in g.member_ids for mid in issue.affected_ids)]
        for group_id in targets:
            kinds = blocked.setdefault(group_id, [])
            if issue.kind.value not in kinds:
                kinds.append(issue.kind.value)
    return blocked


def clone_destination(target_dir, layout, assignment, group, repo_name):
    if layout == CloneLayout.by_group:
        return os.path.join(target_dir, slugify(group.name), repo_name)
    if layout == CloneLayout.by_assignment:
        return os.path.join(target_dir, slugify(assignment.name), repo_name)
    return os.path.join(target_dir, repo_name)


class _Task:
    def __init__(self, group, repo_name, destination=None):
        self.group = group
        self.repo_name = repo_name
        self.destination = destination


def _attempt(platform, operation, task, overwrite, private, cancel_event):
    """Run one group's operation. Returns ``(skip reason or None, error message or None)``."""
    if cancel_event is not None and cancel_event.is_set():
        return SkipReason.cancelled, None

    try:
        if operation == RepoOperation.create:
            if platform.repo_exists(task.repo_name):
                if not overwrite:
                    return SkipReason.repo_exists, None
                logger.info("Overwriting %s.", task.repo_name)
                platform.delete_repo(task.repo_name)
            platform.create_repo(task.repo_name, private=private)

        elif operation == RepoOperation.clone:
            if os.path.exists(task.destination):
                return SkipReason.directory_exists, None
            if not platform.repo_exists(task.repo_name):
                return SkipReason.repo_not_found, None
            os.makedirs(os.path.dirname(task.destination) or ".", exist_ok=True)
            platform.clone_repo(task.repo_name, task.destination, attempts=3)

        elif operation == RepoOperation.delete:
            if not platform.repo_exists(task.repo_name):
                return SkipReason.repo_not_found, None
            try:
                platform.delete_repo(task.repo_name)
            except RepositoryNotFound:
                return SkipReason.repo_not_found, None

    except (RepoError, OSError) as e:
        logger.warning("%s failed for %s: %s", operation.value, task.repo_name, e)
        return None, str(e)

    logger.debug("%s %s: done.", operation.value, task.repo_name)
    return None, None


def _plan(roster, assignment, groups, validation, template, operation, target_dir, layout):
    """Split groups into skipped groups and tasks, in resolved order.

    Returns a list with, per unique group, either a ``SkippedGroup`` or a
    ``_Task``.
    """
    blocked = blocked_groups(roster, groups, validation)
    plan = []
    seen = set()
    for group in groups:
        if group.id in seen:
            continue
        seen.add(group.id)

        if group.id in blocked:
            plan.append(SkippedGroup(group.id, group.name, SkipReason.blocked,
                                     ", ".join(blocked[group.id])))
            continue
        if not active_member_ids(roster, group):
            plan.append(SkippedGroup(group.id, group.name, SkipReason.empty_group))
            continue

        repo_name = compute_repo_name(template, assignment, group)
        destination = None
        if operation == RepoOperation.clone:
            destination = clone_destination(target_dir or os.getcwd(), layout,
                                            assignment, group, repo_name)
        plan.append(_Task(group, repo_name, destination))
    return plan


def _assignment_and_groups(roster, assignment_id):
    assignment = roster.find_assignment(assignment_id)
    if assignment is None:
        raise AssignmentNotFound("No assignment with id {}".format(assignment_id))
    return assignment, resolve_assignment_groups(roster, assignment)


def run_operation(platform, roster, assignment_id, operation, validation=None, template=None,
                  target_dir=None, layout=CloneLayout.flat, overwrite=False, private=True,
                  max_workers=1, cancel_event=None, on_progress=None):
    """Create, clone or delete the repositories of an assignment's groups.

    ``validation`` is the assignment's validation result; groups affected by
    its blocking issues are skipped. Setting ``cancel_event`` stops further
    groups from being started; those are reported as cancelled.
    """
    assignment, groups = _assignment_and_groups(roster, assignment_id)
    template = assignment.repo_name_template or template or DEFAULT_REPO_TEMPLATE
    plan = _plan(roster, assignment, groups, validation, template, operation, target_dir, layout)

    tasks = [item for item in plan if isinstance(item, _Task)]
    logger.info("%s: %d repositories for %s (%d groups skipped).", operation.value,
                len(tasks), assignment.name, len(plan) - len(tasks))

    outcomes = {}
    done = [0]
    lock = threading.Lock()

    def run(task):
        outcome = _attempt(platform, operation, task, overwrite, private, cancel_event)
        if on_progress is not None:
            with lock:
                done[0] += 1
                on_progress(done[0], len(tasks))
        return outcome

    if tasks:
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            futures = [(task, executor.submit(run, task)) for task in tasks]
            for task, future in futures:
                outcomes[id(task)] = future.result()

    result = OperationResult()
    for item in plan:
        if isinstance(item, SkippedGroup):
            result.skipped_groups.append(item)
            continue

        reason, message = outcomes[id(item)]
        if reason is not None:
            result.skipped_groups.append(SkippedGroup(item.group.id, item.group.name, reason))
        elif message is not None:
            result.failed += 1
            result.errors.append(OperationError(item.repo_name, message))
        else:
            result.succeeded += 1

    logger.info("%s: %d succeeded, %d failed, %d skipped.", operation.value,
                result.succeeded, result.failed, len(result.skipped_groups))
    return result


def preflight(platform, roster, assignment_id, operation, template=None, target_dir=None,
              layout=CloneLayout.flat):
    """List the groups an operation would skip because of existing state.

    Nothing is changed on the platform or on disk.
    """
    assignment, groups = _assignment_and_groups(roster, assignment_id)
    template = assignment.repo_name_template or template or DEFAULT_REPO_TEMPLATE
    plan = _plan(roster, assignment, groups, None, template, operation, target_dir, layout)

    collisions = []
    for task in plan:
        if not isinstance(task, _Task):
            continue
        if operation == RepoOperation.create:
            if platform.repo_exists(task.repo_name):
                collisions.append(RepoCollision(task.group.id, task.group.name,
                                                task.repo_name, SkipReason.repo_exists))
        elif operation == RepoOperation.clone and os.path.exists(task.destination):
            collisions.append(RepoCollision(task.group.id, task.group.name,
                                            task.repo_name, SkipReason.directory_exists))
        elif operation in (RepoOperation.clone, RepoOperation.delete):
            if not platform.repo_exists(task.repo_name):
                collisions.append(RepoCollision(task.group.id, task.group.name,
                                                task.repo_name, SkipReason.repo_not_found))
    return collisions
