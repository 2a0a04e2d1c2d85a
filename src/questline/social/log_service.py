"""Read-side accessors behind the activity log pages.

Onboarding date, completed missions, volunteer participation and the
per-user summary row. Everything here is read-only except volunteer
registration.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import distinct, func, select
from sqlalchemy.exc import IntegrityError

from questline.db.models import (
    Friendship,
    Mission,
    MissionCompletion,
    QuizResult,
    User,
    VolunteerActivity,
    VolunteerRegistration,
)
from questline.errors import NotFoundError, ServiceError
from questline.social.activity_service import record_activity
from questline.social.friend_service import involves

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_onboarding_info(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """The onboarding date is the account creation time."""
    row = (await db.execute(select(User.id, User.name, User.email, User.created_at).where(User.id == user_id))).first()
    if row is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return {"user_id": row.id, "name": row.name, "email": row.email, "onboarding_date": row.created_at}


async def list_completed_missions(db: AsyncSession, user_id: int) -> dict[str, Any]:
    result = await db.execute(
        select(MissionCompletion, Mission)
        .join(Mission, Mission.id == MissionCompletion.mission_id)
        .where(MissionCompletion.user_id == user_id)
        .order_by(MissionCompletion.completed_at.desc(), MissionCompletion.id.desc())
    )
    missions = [
        {
            "completion_id": completion.id,
            "mission_id": mission.id,
            "title": mission.title,
            "description": mission.description,
            "reward_points": mission.reward_points,
            "category": mission.category,
            "completed_at": completion.completed_at,
            "completed_date": completion.completed_date,
        }
        for completion, mission in result.all()
    ]
    return {"total_completed": len(missions), "missions": missions}


async def get_mission_completion_details(db: AsyncSession, user_id: int, mission_id: int) -> dict[str, Any]:
    """Latest completion of one mission by the user, plus how often it was completed."""
    owned = (MissionCompletion.user_id == user_id, MissionCompletion.mission_id == mission_id)
    row = (
        await db.execute(
            select(MissionCompletion, Mission)
            .join(Mission, Mission.id == MissionCompletion.mission_id)
            .where(*owned)
            .order_by(MissionCompletion.completed_at.desc(), MissionCompletion.id.desc())
            .limit(1)
        )
    ).first()
    if row is None:
        msg = "Mission completion record not found"
        raise NotFoundError(msg)
    completion, mission = row
    count = (await db.execute(select(func.count(MissionCompletion.id)).where(*owned))).scalar_one()
    return {
        "mission_id": mission.id,
        "title": mission.title,
        "description": mission.description,
        "reward_points": mission.reward_points,
        "category": mission.category,
        "difficulty": mission.difficulty,
        "last_completed_at": completion.completed_at,
        "completion_count": int(count or 0),
    }


def _volunteer_dict(activity: VolunteerActivity, registration: VolunteerRegistration) -> dict[str, Any]:
    return {
        "activity_id": activity.id,
        "title": activity.title,
        "description": activity.description,
        "location": activity.location,
        "start_date": activity.start_date,
        "end_date": activity.end_date,
        "registration_id": registration.id,
        "registration_date": registration.registration_date,
        "registration_status": registration.status,
    }


def _volunteer_count() -> Any:  # noqa: ANN401
    return (
        select(func.count(VolunteerRegistration.id))
        .where(VolunteerRegistration.activity_id == VolunteerActivity.id)
        .correlate(VolunteerActivity)
        .scalar_subquery()
    )


async def list_volunteer_activities(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """Volunteer activities the user registered for, with each activity's head count."""
    result = await db.execute(
        select(VolunteerActivity, VolunteerRegistration, _volunteer_count().label("total_volunteers"))
        .join(VolunteerRegistration, VolunteerRegistration.activity_id == VolunteerActivity.id)
        .where(VolunteerRegistration.user_id == user_id)
        .order_by(VolunteerRegistration.registration_date.desc(), VolunteerRegistration.id.desc())
    )
    activities = []
    for activity, registration, total in result.all():
        data = _volunteer_dict(activity, registration)
        data["total_volunteers"] = int(total or 0)
        activities.append(data)
    return {"total_activities": len(activities), "activities": activities}


async def get_volunteer_activity_details(db: AsyncSession, user_id: int, activity_id: int) -> dict[str, Any]:
    row = (
        await db.execute(
            select(VolunteerActivity, VolunteerRegistration, _volunteer_count().label("total_volunteers"))
            .join(VolunteerRegistration, VolunteerRegistration.activity_id == VolunteerActivity.id)
            .where(VolunteerRegistration.user_id == user_id, VolunteerActivity.id == activity_id)
        )
    ).first()
    if row is None:
        msg = "Volunteer activity registration not found"
        raise NotFoundError(msg)
    activity, registration, total = row
    data = _volunteer_dict(activity, registration)
    data["total_volunteers"] = int(total or 0)
    return data


async def list_open_volunteer_activities(db: AsyncSession) -> list[dict[str, Any]]:
    """Every volunteer activity with its head count, soonest first."""
    result = await db.execute(
        select(VolunteerActivity, _volunteer_count().label("total_volunteers")).order_by(
            VolunteerActivity.start_date, VolunteerActivity.id
        )
    )
    return [
        {
            "activity_id": activity.id,
            "title": activity.title,
            "description": activity.description,
            "location": activity.location,
            "start_date": activity.start_date,
            "end_date": activity.end_date,
            "total_volunteers": int(total or 0),
        }
        for activity, total in result.all()
    ]


async def register_for_volunteer_activity(db: AsyncSession, user_id: int, activity_id: int) -> VolunteerRegistration:
    """
    Sign the user up for a volunteer activity.

    Raises:
        NotFoundError: Unknown activity.
        ServiceError: Already registered.
    """
    title = (await db.execute(select(VolunteerActivity.title).where(VolunteerActivity.id == activity_id))).scalar()
    if title is None:
        msg = "Volunteer activity not found"
        raise NotFoundError(msg)
    registration = VolunteerRegistration(
        user_id=user_id,
        activity_id=activity_id,
        registration_date=datetime.now(timezone.utc),
        status="registered",
    )
    db.add(registration)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "Already registered for this activity"
        raise ServiceError(msg) from e
    await record_activity(
        db, user_id, "volunteer_registered", f"Volunteering: {title}", metadata={"activity_id": activity_id}
    )
    logger.info("volunteer_registered", user_id=user_id, activity_id=activity_id)
    return registration


async def get_user_activity_log(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """One summary row: mission, quiz, volunteer and friend counts plus total points."""
    missions = (
        select(func.count(MissionCompletion.id)).where(MissionCompletion.user_id == User.id).correlate(User).scalar_subquery()
    )
    quizzes_passed = (
        select(func.count(distinct(QuizResult.quiz_id)))
        .where(QuizResult.user_id == User.id, QuizResult.passed.is_(True))
        .correlate(User)
        .scalar_subquery()
    )
    volunteer = (
        select(func.count(VolunteerRegistration.id))
        .where(VolunteerRegistration.user_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    friends = (
        select(func.count(Friendship.id))
        .where(involves(user_id), Friendship.status == "accepted")
        .scalar_subquery()
    )
    row = (
        await db.execute(
            select(
                User.id,
                User.name,
                User.total_points,
                User.created_at,
                missions.label("missions"),
                quizzes_passed.label("quizzes_passed"),
                volunteer.label("volunteer"),
                friends.label("friends"),
            ).where(User.id == user_id)
        )
    ).first()
    if row is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return {
        "user_id": row.id,
        "name": row.name,
        "onboarding_date": row.created_at,
        "total_missions_completed": int(row.missions or 0),
        "total_quizzes_passed": int(row.quizzes_passed or 0),
        "total_volunteer_activities": int(row.volunteer or 0),
        "total_friends": int(row.friends or 0),
        "total_points": row.total_points,
    }
