"""Stages of a bulk upload session and the moves allowed between them"""

from enum import Enum


class Stage(Enum):
    PHOTOS = "photos"
    UPLOADING = "uploading"
    GROUPING = "grouping"
    ASSIGNING = "assigning"
    ENHANCING = "enhancing"
    REVIEWING = "reviewing"
    FINAL = "final"
    PUBLISHING = "publishing"
    SUCCESS = "success"


class WorkflowStateError(Exception):
    """An operation was attempted from a stage that does not allow it"""


TRANSITIONS = {
    Stage.PHOTOS: {Stage.UPLOADING},
    Stage.UPLOADING: {Stage.GROUPING, Stage.PHOTOS},
    Stage.GROUPING: {Stage.ASSIGNING},
    Stage.ASSIGNING: {Stage.ENHANCING},
    Stage.ENHANCING: {Stage.REVIEWING, Stage.ASSIGNING},
    Stage.REVIEWING: {Stage.FINAL, Stage.ENHANCING},
    Stage.FINAL: {Stage.REVIEWING, Stage.PUBLISHING},
    Stage.PUBLISHING: {Stage.SUCCESS, Stage.FINAL},
    Stage.SUCCESS: set(),
}

# Stages with no request in flight
CLOSABLE_STAGES = {Stage.PHOTOS, Stage.SUCCESS, Stage.FINAL}


def can_transition(current: Stage, target: Stage) -> bool:
    return target in TRANSITIONS[current]
