"""
Planning Models: tasks, habits, CRM contacts and goals.

These are the non-financial halves of the aggregate. Goals carry the
optional financial fields used for goal-based investing.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from lifeos.models.base import Entity, OptionalDate, OptionalStr, ReadOnlyMap


# =============================================================================
# ENUMS
# =============================================================================

class Priority(str, Enum):
    """Task priority, P1 being the most urgent."""
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


class TaskCategory(str, Enum):
    """Life area a task belongs to."""
    INBOX = "Inbox"
    PROFESSIONAL = "Professional"
    FINANCIAL = "Financial"
    WELLNESS = "Wellness"
    RELATIONSHIP = "Relationship"
    PERSONAL = "Personal"
    VISION = "Vision"


class LeadStage(str, Enum):
    """CRM pipeline stage. Won and Lost are terminal."""
    NEW = "New"
    CONTACTED = "Contacted"
    PROCESSING = "Processing"
    WON = "Won"
    LOST = "Lost"


class GoalHorizon(str, Enum):
    ONE_YEAR = "1 Year"
    THREE_YEARS = "3 Years"
    FIVE_YEARS = "5 Years"
    TEN_PLUS_YEARS = "10+ Years"


class GoalTier(str, Enum):
    """Priority hierarchy for financial goals."""
    FREEDOM = "Freedom"
    LIFESTYLE = "Lifestyle"


class LifeGoalType(str, Enum):
    MUST_HAVE = "Must-Have"
    GOOD_TO_HAVE = "Good-to-Have"


# =============================================================================
# ENTITIES
# =============================================================================

class Task(Entity):
    """A to-do item."""

    title: str = Field(..., min_length=1, max_length=300)
    completed: bool = False
    category: TaskCategory = TaskCategory.INBOX
    priority: Priority = Priority.P4
    is_today_focus: bool = False
    due_date: OptionalDate = None
    project_id: OptionalStr = None


class Habit(Entity):
    """
    A tracked habit.

    history maps ISO dates (YYYY-MM-DD) to whether the habit was done.
    streak is adjusted by toggling, never recomputed from history.
    """

    title: str = Field(..., min_length=1, max_length=200)
    streak: int = Field(default=0, ge=0)
    history: ReadOnlyMap[str, bool] = Field(default_factory=dict, validate_default=True)
    category: str = "Personal"


class Contact(Entity):
    """A CRM lead or relationship."""

    name: str = Field(..., min_length=1, max_length=200)
    company: OptionalStr = None
    role: OptionalStr = None
    email: OptionalStr = None
    phone: OptionalStr = None
    stage: LeadStage = LeadStage.NEW
    deal_value: Optional[float] = Field(default=None, ge=0)
    last_contacted: datetime


class Goal(Entity):
    """
    A vision-board goal.

    For financial goals, future_value and required_sip are derived once,
    when the goal is created, and cached on the entity.
    """

    title: str = Field(..., min_length=1, max_length=300)
    horizon: GoalHorizon = GoalHorizon.ONE_YEAR
    progress: float = Field(default=0, ge=0, le=100)

    is_financial: bool = False
    current_cost: Optional[float] = Field(default=None, ge=0)
    years_away: Optional[float] = Field(default=None, ge=0)
    inflation_rate: Optional[float] = Field(default=None, ge=0)
    future_value: Optional[float] = Field(default=None, ge=0)
    required_sip: Optional[float] = Field(default=None, ge=0, alias="requiredSIP")
    tier: Optional[GoalTier] = None


class LifeGoal(Entity):
    """A ranked "why" statement from the vision exercise."""

    title: str = Field(..., min_length=1, max_length=300)
    type: LifeGoalType = LifeGoalType.MUST_HAVE
