#!/usr/bin/env python

"""
@file pheme/core/task.py
@brief Task: a deferred unit of work with a cost estimate phase and a
        side effecting execute phase sharing one mutable context
"""

from twisted.internet import defer

import pheme.util.phemelog
log = pheme.util.phemelog.getLogger(__name__)

def _zero_cost(context):
    return 0

class Task(object):
    """
    A two-phase, possibly side-effecting operation.

    Both phases are callables taking the task context (a dict owned by this
    task instance) and returning either a plain value or a Deferred.
    estimate() must not have perceivable side effects and may be called any
    number of times. execute() performs the side effect once per call; it is
    not memoized.

    Tasks carry no internal locking. Do not execute the same instance
    concurrently.
    """

    def __init__(self, estimate, execute, context):
        """
        @param estimate callable(context) pricing the task
        @param execute callable(context) performing the task
        @param context dict shared by both phases
        """
        self.context = context
        self._estimate = estimate
        self._execute = execute

    def __str__(self):
        return "Task(context=%r)" % (self.context,)

    def estimate(self):
        """
        @retval Deferred, fires with the cost of executing this task
        """
        return defer.maybeDeferred(self._estimate, self.context)

    def execute(self):
        """
        @retval Deferred, fires with the operation specific result
        """
        return defer.maybeDeferred(self._execute, self.context)

def create_task(operations, context=None):
    """
    @brief Builds a Task bound to the given operations.
    @param operations dict with an 'execute' callable and optionally an
        'estimate' callable; both are called with the shared context.
        A missing estimate prices the task at 0.
    @param context initial content of the shared context
    @retval Task
    """
    if 'execute' not in operations:
        raise ValueError("A task needs an execute operation")
    estimate = operations.get('estimate') or _zero_cost
    return Task(estimate, operations['execute'], dict(context or {}))

def modify_task(task, overrides):
    """
    @brief Returns a new Task sharing the context object of the given task,
        with estimate and/or execute replaced by the supplied overrides.
        Phases that are not overridden delegate to the source task.
    @param task source Task
    @param overrides dict with 'estimate' and/or 'execute' callables taking
        the shared context
    @retval Task
    """
    estimate = overrides.get('estimate') or (lambda context: task.estimate())
    execute = overrides.get('execute') or (lambda context: task.execute())
    return Task(estimate, execute, task.context)
