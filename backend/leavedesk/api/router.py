from fastapi import APIRouter

from leavedesk.api.allocations import allocations_router, user_allocations_router
from leavedesk.api.leave_types import leave_types_router
from leavedesk.api.requests import requests_router

api_router = APIRouter()
api_router.include_router(leave_types_router)
api_router.include_router(allocations_router)
api_router.include_router(user_allocations_router)
api_router.include_router(requests_router)
