"""Baseline: users, sessions, catalog, journey and social tables.

Revision ID: 001_baseline
Revises:
Create Date: 2026-10-18
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id SERIAL PRIMARY KEY,
            name VARCHAR(100) NOT NULL,
            email VARCHAR(320) UNIQUE NOT NULL,
            password_hash VARCHAR(256) NOT NULL,
            age INTEGER NOT NULL,
            total_points INTEGER NOT NULL DEFAULT 0,
            role VARCHAR(16) NOT NULL DEFAULT 'user',
            avatar_url TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ,
            last_login TIMESTAMPTZ,
            CONSTRAINT ck_users_min_age CHECK (age >= 13),
            CONSTRAINT ck_users_points_non_negative CHECK (total_points >= 0)
        )
    """)
    op.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_users_email_lower ON users(LOWER(email))")

    op.execute("""
        CREATE TABLE IF NOT EXISTS user_sessions (
            id VARCHAR(36) PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            issued_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            expires_at TIMESTAMPTZ NOT NULL,
            is_revoked BOOLEAN NOT NULL DEFAULT FALSE,
            revoked_at TIMESTAMPTZ,
            ip_address VARCHAR(64),
            user_agent VARCHAR(512)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_user_sessions_user ON user_sessions(user_id)")

    # --- Missions ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS missions (
            id SERIAL PRIMARY KEY,
            title VARCHAR(200) NOT NULL,
            description TEXT,
            reward_points INTEGER NOT NULL DEFAULT 0,
            category VARCHAR(64),
            difficulty VARCHAR(32),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS mission_completions (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            mission_id INTEGER NOT NULL REFERENCES missions(id) ON DELETE CASCADE,
            completed_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            completed_date DATE NOT NULL,
            CONSTRAINT uq_mission_completions_daily UNIQUE (user_id, mission_id, completed_date)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_mission_completions_user ON mission_completions(user_id)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_mission_completions_mission ON mission_completions(mission_id)")

    # --- Quizzes ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS quizzes (
            id SERIAL PRIMARY KEY,
            title VARCHAR(200) NOT NULL,
            description TEXT,
            category VARCHAR(64),
            difficulty_level VARCHAR(32),
            reward_points INTEGER NOT NULL DEFAULT 0,
            time_limit INTEGER,
            passing_score INTEGER NOT NULL DEFAULT 70,
            status VARCHAR(16) NOT NULL DEFAULT 'active',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ,
            CONSTRAINT ck_quizzes_passing_score_range CHECK (passing_score >= 0 AND passing_score <= 100)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS quiz_questions (
            id SERIAL PRIMARY KEY,
            quiz_id INTEGER NOT NULL REFERENCES quizzes(id) ON DELETE CASCADE,
            question_text TEXT NOT NULL,
            question_type VARCHAR(32) NOT NULL DEFAULT 'multiple_choice',
            option_a TEXT,
            option_b TEXT,
            option_c TEXT,
            option_d TEXT,
            correct_answer VARCHAR(1) NOT NULL
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_quiz_questions_quiz ON quiz_questions(quiz_id)")
    op.execute("""
        CREATE TABLE IF NOT EXISTS quiz_results (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            quiz_id INTEGER NOT NULL REFERENCES quizzes(id) ON DELETE CASCADE,
            score DOUBLE PRECISION NOT NULL,
            passed BOOLEAN NOT NULL,
            reward_earned INTEGER NOT NULL DEFAULT 0,
            correct_answers INTEGER NOT NULL DEFAULT 0,
            total_questions INTEGER NOT NULL DEFAULT 0,
            submitted_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_quiz_results_user ON quiz_results(user_id, submitted_at DESC)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_quiz_results_quiz ON quiz_results(quiz_id)")

    # --- Games ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS games (
            id SERIAL PRIMARY KEY,
            title VARCHAR(200) NOT NULL,
            description TEXT,
            genre VARCHAR(64),
            difficulty_level VARCHAR(32),
            reward_points INTEGER NOT NULL DEFAULT 0,
            image_url TEXT,
            status VARCHAR(16) NOT NULL DEFAULT 'active',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS game_completions (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            game_id INTEGER NOT NULL REFERENCES games(id) ON DELETE CASCADE,
            completed_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_game_completions_game ON game_completions(game_id)")
    op.execute("""
        CREATE TABLE IF NOT EXISTS game_ratings (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            game_id INTEGER NOT NULL REFERENCES games(id) ON DELETE CASCADE,
            rating INTEGER NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ,
            CONSTRAINT uq_game_ratings_user_game UNIQUE (user_id, game_id),
            CONSTRAINT ck_game_ratings_rating_range CHECK (rating >= 1 AND rating <= 5)
        )
    """)

    # --- Journey ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS startings (
            id SERIAL PRIMARY KEY,
            user_id INTEGER UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            title VARCHAR(200) NOT NULL,
            description TEXT NOT NULL,
            status VARCHAR(16) NOT NULL DEFAULT 'active',
            start_date TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS endings (
            id SERIAL PRIMARY KEY,
            user_id INTEGER UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            title VARCHAR(200) NOT NULL,
            description TEXT,
            status VARCHAR(16) NOT NULL DEFAULT 'completed',
            completion_date TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Social ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS friendships (
            id SERIAL PRIMARY KEY,
            user_id_1 INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            user_id_2 INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            status VARCHAR(16) NOT NULL DEFAULT 'pending',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ,
            CONSTRAINT uq_friendships_pair UNIQUE (user_id_1, user_id_2),
            CONSTRAINT ck_friendships_no_self_friendship CHECK (user_id_1 <> user_id_2)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_friendships_user_1 ON friendships(user_id_1)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_friendships_user_2 ON friendships(user_id_2)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS volunteer_activities (
            id SERIAL PRIMARY KEY,
            title VARCHAR(200) NOT NULL,
            description TEXT,
            location VARCHAR(200),
            start_date TIMESTAMPTZ,
            end_date TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS volunteer_registrations (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            activity_id INTEGER NOT NULL REFERENCES volunteer_activities(id) ON DELETE CASCADE,
            registration_date TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            status VARCHAR(16) NOT NULL DEFAULT 'registered',
            CONSTRAINT uq_volunteer_registrations_user_activity UNIQUE (user_id, activity_id)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS user_activity (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            activity_type VARCHAR(64) NOT NULL,
            title VARCHAR(256) NOT NULL,
            description TEXT,
            metadata JSON NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_user_activity_user ON user_activity(user_id, created_at DESC)")


def downgrade() -> None:
    for table in (
        "user_activity",
        "volunteer_registrations",
        "volunteer_activities",
        "friendships",
        "endings",
        "startings",
        "game_ratings",
        "game_completions",
        "games",
        "quiz_results",
        "quiz_questions",
        "quizzes",
        "mission_completions",
        "missions",
        "user_sessions",
        "users",
    ):
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")
