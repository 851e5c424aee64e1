from fastapi import APIRouter

from punchclock.api.attendance import attendance_router, classification_router
from punchclock.api.employees import employees_router
from punchclock.api.holidays import holiday_selection_router, holidays_router
from punchclock.api.overtime import employee_overtime_router, overtime_admin_router
from punchclock.api.tasks import escalations_router, tasks_router
from punchclock.api.thresholds import thresholds_router

api_router = APIRouter()
api_router.include_router(attendance_router)
api_router.include_router(classification_router)
api_router.include_router(employee_overtime_router)
api_router.include_router(overtime_admin_router)
api_router.include_router(thresholds_router)
api_router.include_router(holidays_router)
api_router.include_router(holiday_selection_router)
api_router.include_router(tasks_router)
api_router.include_router(escalations_router)
api_router.include_router(employees_router)
