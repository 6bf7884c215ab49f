from fastapi import APIRouter

from rotadesk.api.balances import adjustment_router, user_balance_router
from rotadesk.api.comments import comments_router, leave_comments_router, swap_comments_router
from rotadesk.api.leave_requests import leave_requests_router
from rotadesk.api.leave_types import leave_types_router
from rotadesk.api.settings import settings_router
from rotadesk.api.shifts import shifts_router
from rotadesk.api.swap_requests import swap_requests_router

api_router = APIRouter()
api_router.include_router(leave_requests_router)
api_router.include_router(leave_comments_router)
api_router.include_router(swap_requests_router)
api_router.include_router(swap_comments_router)
api_router.include_router(comments_router)
api_router.include_router(user_balance_router)
api_router.include_router(adjustment_router)
api_router.include_router(leave_types_router)
api_router.include_router(shifts_router)
api_router.include_router(settings_router)
