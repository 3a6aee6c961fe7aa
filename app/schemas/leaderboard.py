"""
Leaderboard Schemas
"""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    rank: int
    student_id: UUID
    student_name: str
    student_email: str
    score: int
    total_answers: int
    correct_answers: int
    average_response_time_ms: float


class LeaderboardResponse(BaseModel):
    class_id: Optional[UUID] = None
    entries: List[LeaderboardEntry]
    truncated: bool = False
