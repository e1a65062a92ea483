"""
vaultstage staging module.

Queues of pending create, modify and remove operations, and the paths
that validate operator input into them.
"""

from .create import (
    add_standard_member,
    member_id,
    parse_retention,
    remove_standard_member,
    set_standard_member_permission,
    stage_account,
    stage_custom_member,
    stage_safe,
    stage_standard_members,
    toggle_standard_member,
    update_standard_member,
)
from .forms import AccountForm, MemberForm, SafeForm, StandardMemberPanel
from .modify import EditSession, begin_edit, cancel_edit, save_edit, update_edit
from .queues import DEPLOY_ORDER, OperationKind, ResourceKind, StagingArea, StagingQueue
from .remove import SelectionSet, filtered, stage_removals

__all__ = [
    # Queues
    "ResourceKind",
    "OperationKind",
    "DEPLOY_ORDER",
    "StagingQueue",
    "StagingArea",
    # Forms
    "SafeForm",
    "MemberForm",
    "AccountForm",
    "StandardMemberPanel",
    # Create
    "member_id",
    "parse_retention",
    "stage_safe",
    "stage_custom_member",
    "stage_standard_members",
    "stage_account",
    "toggle_standard_member",
    "set_standard_member_permission",
    "add_standard_member",
    "remove_standard_member",
    "update_standard_member",
    # Modify
    "EditSession",
    "begin_edit",
    "update_edit",
    "cancel_edit",
    "save_edit",
    # Remove
    "SelectionSet",
    "filtered",
    "stage_removals",
]
