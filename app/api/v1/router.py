from fastapi import APIRouter
from app.api.v1.endpoints import auth, students, admin, leaderboard

# ============================================================
# Main API v1 Router
# ============================================================

api_router = APIRouter()

api_router.include_router(
    auth.router,
    prefix="/auth"
)

api_router.include_router(
    students.router,
    prefix="/students"
)

api_router.include_router(
    admin.router,
    prefix="/admin"
)

api_router.include_router(
    leaderboard.router,
    prefix="/leaderboard"
)
