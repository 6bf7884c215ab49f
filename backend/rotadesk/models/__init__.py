from sqlmodel import SQLModel

from rotadesk.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from rotadesk.models.comment import RequestComment
from rotadesk.models.enums import (
    ActorCapacity,
    LeaveStatus,
    RequestKind,
    ShiftType,
    SwapStatus,
    TransitionAction,
    UserRole,
)
from rotadesk.models.leave import LeaveBalance, LeaveBalanceHistory, LeaveRequest, LeaveTypeConfig
from rotadesk.models.setting import AppSetting
from rotadesk.models.shift import Shift
from rotadesk.models.swap import SwapRequest

__all__ = [
    "ActorCapacity",
    "AppSetting",
    "LeaveBalance",
    "LeaveBalanceHistory",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveTypeConfig",
    "RequestComment",
    "RequestKind",
    "SQLModel",
    "Shift",
    "ShiftType",
    "SwapRequest",
    "SwapStatus",
    "TimestampMixin",
    "TransitionAction",
    "UpdatedAtMixin",
    "UUIDBase",
    "UserRole",
]
