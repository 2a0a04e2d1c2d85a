"""Starter catalog: missions, quizzes with questions, games and volunteer activities.

Seeding is idempotent: rows are matched by title and only missing ones are
inserted, so admin edits to existing rows survive restarts.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from questline.db.models import Game, Mission, Quiz, QuizQuestion, VolunteerActivity

logger = logging.getLogger(__name__)

MISSION_SEED_DATA: list[dict[str, Any]] = [
    {
        "title": "Complete your profile",
        "description": "Add your name and age so other players can find you",
        "reward_points": 20,
        "category": "onboarding",
        "difficulty": "easy",
    },
    {
        "title": "Daily check-in",
        "description": "Log in and visit your dashboard",
        "reward_points": 10,
        "category": "daily",
        "difficulty": "easy",
    },
    {
        "title": "Take a quiz",
        "description": "Attempt any quiz from the quiz list",
        "reward_points": 30,
        "category": "learning",
        "difficulty": "medium",
    },
    {
        "title": "Make a friend",
        "description": "Send a friend request to another player",
        "reward_points": 25,
        "category": "social",
        "difficulty": "medium",
    },
    {
        "title": "Give back",
        "description": "Sign up for a volunteer activity",
        "reward_points": 50,
        "category": "community",
        "difficulty": "hard",
    },
]

QUIZ_SEED_DATA: list[dict[str, Any]] = [
    {
        "title": "Getting Started",
        "description": "How the onboarding journey works",
        "category": "onboarding",
        "difficulty_level": "easy",
        "reward_points": 40,
        "time_limit": 5,
        "passing_score": 60,
        "questions": [
            {
                "question_text": "How often can the same mission be completed?",
                "option_a": "Once ever",
                "option_b": "Once per day",
                "option_c": "Once per hour",
                "option_d": "Unlimited",
                "correct_answer": "B",
            },
            {
                "question_text": "What do you earn for completing missions?",
                "option_a": "Badges",
                "option_b": "Coins",
                "option_c": "Points",
                "option_d": "Nothing",
                "correct_answer": "C",
            },
            {
                "question_text": "Where does your journey begin?",
                "option_a": "The starting page",
                "option_b": "The ending page",
                "option_c": "The games page",
                "option_d": "The quiz page",
                "correct_answer": "A",
            },
        ],
    },
    {
        "title": "Community Basics",
        "description": "Friends, volunteering and the activity log",
        "category": "community",
        "difficulty_level": "medium",
        "reward_points": 60,
        "time_limit": 10,
        "passing_score": 70,
        "questions": [
            {
                "question_text": "What does the activity log summarize?",
                "option_a": "Only your points",
                "option_b": "Missions, volunteering, friends and points",
                "option_c": "Only your friends",
                "option_d": "Server status",
                "correct_answer": "B",
            },
            {
                "question_text": "A friendship becomes visible in your friend list once it is...",
                "option_a": "Requested",
                "option_b": "Declined",
                "option_c": "Accepted",
                "option_d": "Deleted",
                "correct_answer": "C",
            },
        ],
    },
]

GAME_SEED_DATA: list[dict[str, Any]] = [
    {
        "title": "Word Sprint",
        "description": "Find as many words as you can in sixty seconds",
        "genre": "puzzle",
        "difficulty_level": "easy",
        "reward_points": 15,
    },
    {
        "title": "Memory Match",
        "description": "Flip cards and match the pairs",
        "genre": "memory",
        "difficulty_level": "easy",
        "reward_points": 10,
    },
    {
        "title": "Logic Grid",
        "description": "Deduce the answer from a set of clues",
        "genre": "puzzle",
        "difficulty_level": "hard",
        "reward_points": 40,
    },
    {
        "title": "Quick Math",
        "description": "Solve arithmetic problems against the clock",
        "genre": "arcade",
        "difficulty_level": "medium",
        "reward_points": 25,
    },
]

VOLUNTEER_SEED_DATA: list[dict[str, Any]] = [
    {
        "title": "Park clean-up",
        "description": "Help tidy up the neighbourhood park",
        "location": "Central Park",
        "start_offset_days": 7,
        "duration_hours": 3,
    },
    {
        "title": "Food bank shift",
        "description": "Sort and pack donations",
        "location": "Community Food Bank",
        "start_offset_days": 14,
        "duration_hours": 4,
    },
]


async def _existing_titles(db: AsyncSession, model: Any) -> set[str]:  # noqa: ANN401
    return set((await db.execute(select(model.title))).scalars().all())


async def seed_catalog(db: AsyncSession) -> int:
    """Insert missing catalog rows. Returns the number of rows inserted."""
    now = datetime.now(timezone.utc)
    inserted = 0

    titles = await _existing_titles(db, Mission)
    for data in MISSION_SEED_DATA:
        if data["title"] not in titles:
            db.add(Mission(**data, created_at=now))
            inserted += 1

    titles = await _existing_titles(db, Game)
    for data in GAME_SEED_DATA:
        if data["title"] not in titles:
            db.add(Game(**data, status="active", created_at=now))
            inserted += 1

    titles = await _existing_titles(db, VolunteerActivity)
    for data in VOLUNTEER_SEED_DATA:
        if data["title"] not in titles:
            start = now + timedelta(days=data["start_offset_days"])
            db.add(
                VolunteerActivity(
                    title=data["title"],
                    description=data["description"],
                    location=data["location"],
                    start_date=start,
                    end_date=start + timedelta(hours=data["duration_hours"]),
                    created_at=now,
                )
            )
            inserted += 1

    titles = await _existing_titles(db, Quiz)
    for data in QUIZ_SEED_DATA:
        if data["title"] in titles:
            continue
        fields = {k: v for k, v in data.items() if k != "questions"}
        quiz = Quiz(**fields, status="active", created_at=now)
        db.add(quiz)
        await db.flush()
        for question in data["questions"]:
            db.add(QuizQuestion(quiz_id=quiz.id, **question))
        inserted += 1 + len(data["questions"])

    await db.commit()
    logger.info("Seeded %d catalog rows", inserted)
    return inserted
