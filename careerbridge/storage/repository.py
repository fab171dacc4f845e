"""Database repository for CareerBridge.

This module provides async SQLite operations for users, job postings,
learning resources, AI-extracted skills, the AI audit log and career
roadmaps.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from collections.abc import AsyncGenerator, Callable, Iterable, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from careerbridge.errors import PersistenceConflict, UpstreamUnavailable, logged
from careerbridge.storage.models import (
    AIExtractionRecord,
    CareerRoadmap,
    ExperienceLevel,
    ExtractedSkillRecord,
    JobPosting,
    JobType,
    LearningResource,
    ResourceCost,
    RoadmapContent,
    User,
)

logger = logging.getLogger(__name__)

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    full_name TEXT NOT NULL DEFAULT '',
    email TEXT,
    skills TEXT NOT NULL DEFAULT '[]',
    target_roles TEXT NOT NULL DEFAULT '[]',
    experience_level TEXT,
    onboarding_completed INTEGER NOT NULL DEFAULT 0,
    raw_cv_text TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS jobs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    company TEXT NOT NULL,
    required_skills TEXT NOT NULL DEFAULT '[]',
    experience_level TEXT NOT NULL,
    job_type TEXT NOT NULL,
    location TEXT,
    description TEXT NOT NULL DEFAULT '',
    salary_min INTEGER,
    salary_max INTEGER
);

CREATE TABLE IF NOT EXISTS learning_resources (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    related_skills TEXT NOT NULL DEFAULT '[]',
    cost TEXT NOT NULL,
    platform TEXT,
    url TEXT
);

CREATE TABLE IF NOT EXISTS extracted_skills (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    skill_name TEXT NOT NULL,
    display_name TEXT NOT NULL,
    proficiency TEXT,
    category TEXT,
    source TEXT NOT NULL DEFAULT 'ai_extraction',
    is_verified INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE(user_id, skill_name)
);

CREATE TABLE IF NOT EXISTS ai_extractions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    extraction_type TEXT NOT NULL,
    provider TEXT NOT NULL,
    input_text TEXT NOT NULL,
    raw_output TEXT NOT NULL,
    extracted_data TEXT,
    status TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS career_roadmaps (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    target_role TEXT NOT NULL,
    roadmap_data TEXT NOT NULL,
    ai_provider TEXT NOT NULL,
    timeframe_months INTEGER,
    learning_hours_per_week INTEGER,
    current_skills TEXT NOT NULL DEFAULT '[]',
    progress_percentage INTEGER NOT NULL DEFAULT 0
        CHECK (progress_percentage BETWEEN 0 AND 100),
    completed_phases TEXT NOT NULL DEFAULT '[]',
    notes TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_jobs_filters ON jobs(experience_level, job_type);
CREATE INDEX IF NOT EXISTS idx_resources_cost ON learning_resources(cost);
CREATE INDEX IF NOT EXISTS idx_extracted_skills_user ON extracted_skills(user_id);
CREATE INDEX IF NOT EXISTS idx_ai_extractions_user ON ai_extractions(user_id);
CREATE INDEX IF NOT EXISTS idx_roadmaps_user_created ON career_roadmaps(user_id, created_at);
"""

UPSERT_SKILL_SQL = """
INSERT INTO extracted_skills (
    user_id, skill_name, display_name, proficiency, category, source,
    is_verified, created_at, updated_at
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(user_id, skill_name) DO UPDATE SET
    proficiency = excluded.proficiency,
    category = excluded.category,
    updated_at = excluded.updated_at
"""


def _now() -> datetime:
    return datetime.now(UTC)


def _parse_datetime(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def _dumps(value: object) -> str:
    return json.dumps(value, ensure_ascii=False)


class CareerRepository:
    """Async SQLite repository for all CareerBridge records.

    All statements share a single lazily opened aiosqlite connection guarded
    by an ``asyncio.Lock``. Every write runs inside ``BEGIN IMMEDIATE ...
    COMMIT`` while holding the lock, and reads take the same lock, so a read
    never observes another request's uncommitted (possibly rolled back) rows.
    """

    def __init__(self, db_path: Path | str, timeout: float = 5.0):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
            timeout: Seconds to wait on a locked database before failing.
        """
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Yield the shared connection, translating driver errors."""
        try:
            if self._connection is None:
                self._connection = await aiosqlite.connect(
                    self.db_path, timeout=self.timeout
                )
                self._connection.row_factory = aiosqlite.Row
                await self._connection.execute("PRAGMA foreign_keys = ON")
            yield self._connection
        except sqlite3.IntegrityError as e:
            raise logged(logger, PersistenceConflict(f"Constraint violation: {e}", e)) from e
        except sqlite3.OperationalError as e:
            raise logged(logger, UpstreamUnavailable(f"Database unavailable: {e}", e)) from e

    @asynccontextmanager
    async def _reading(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Yield the connection once no transaction is open on it."""
        async with self._lock, self._get_connection() as conn:
            yield conn

    @asynccontextmanager
    async def _transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Run the enclosed statements as one atomic write."""
        async with self._lock, self._get_connection() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.executescript(CREATE_TABLES_SQL)
            await conn.executescript(CREATE_INDEX_SQL)
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    # --- users -----------------------------------------------------------

    async def insert_user(self, user: User) -> User:
        """Insert a new user.

        Raises:
            PersistenceConflict: If a user with the same id exists.
        """
        now = _now()
        user.created_at = user.created_at or now
        user.updated_at = now
        async with self._transaction() as conn:
            await conn.execute(
                """
                INSERT INTO users (
                    id, full_name, email, skills, target_roles, experience_level,
                    onboarding_completed, raw_cv_text, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user.id,
                    user.full_name,
                    user.email,
                    _dumps(user.skills),
                    _dumps(user.target_roles),
                    user.experience_level.value if user.experience_level else None,
                    1 if user.onboarding_completed else 0,
                    user.raw_cv_text,
                    user.created_at.isoformat(),
                    user.updated_at.isoformat(),
                ),
            )
        return user

    async def get_user(self, user_id: str) -> User | None:
        """Get a user by id, or None."""
        async with self._reading() as conn:
            cursor = await conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = await cursor.fetchone()
        return self._row_to_user(row) if row is not None else None

    async def update_user(
        self,
        user_id: str,
        apply: Callable[[User], None],
        extracted_skills: Sequence[ExtractedSkillRecord] = (),
    ) -> User | None:
        """Atomically read, modify and write a user.

        ``apply`` mutates the freshly loaded user in place. Any
        ``extracted_skills`` are upserted on (user_id, skill_name) in the
        same transaction.

        Returns:
            The updated user, or None if the user does not exist.
        """
        async with self._transaction() as conn:
            cursor = await conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = await cursor.fetchone()
            if row is None:
                return None

            user = self._row_to_user(row)
            apply(user)
            now = _now()
            user.updated_at = now

            await conn.execute(
                """
                UPDATE users
                SET full_name = ?, email = ?, skills = ?, target_roles = ?,
                    experience_level = ?, onboarding_completed = ?,
                    raw_cv_text = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    user.full_name,
                    user.email,
                    _dumps(user.skills),
                    _dumps(user.target_roles),
                    user.experience_level.value if user.experience_level else None,
                    1 if user.onboarding_completed else 0,
                    user.raw_cv_text,
                    now.isoformat(),
                    user_id,
                ),
            )

            for skill in extracted_skills:
                await conn.execute(
                    UPSERT_SKILL_SQL,
                    (
                        user_id,
                        skill.skill_name,
                        skill.display_name,
                        skill.proficiency,
                        skill.category,
                        skill.source,
                        1 if skill.is_verified else 0,
                        now.isoformat(),
                        now.isoformat(),
                    ),
                )
        return user

    async def list_extracted_skills(self, user_id: str) -> list[ExtractedSkillRecord]:
        """List a user's extracted skills ordered by canonical name."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                "SELECT * FROM extracted_skills WHERE user_id = ? ORDER BY skill_name",
                (user_id,),
            )
            rows = await cursor.fetchall()

        return [
            ExtractedSkillRecord(
                user_id=row["user_id"],
                skill_name=row["skill_name"],
                display_name=row["display_name"],
                proficiency=row["proficiency"],
                category=row["category"],
                source=row["source"],
                is_verified=bool(row["is_verified"]),
                created_at=_parse_datetime(row["created_at"]),
                updated_at=_parse_datetime(row["updated_at"]),
            )
            for row in rows
        ]

    # --- jobs ------------------------------------------------------------

    async def insert_job(self, job: JobPosting) -> JobPosting:
        """Insert a job posting and return it with its assigned id."""
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO jobs (
                    title, company, required_skills, experience_level, job_type,
                    location, description, salary_min, salary_max
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    job.title,
                    job.company,
                    _dumps(job.required_skills),
                    job.experience_level.value,
                    job.job_type.value,
                    job.location,
                    job.description,
                    job.salary_min,
                    job.salary_max,
                ),
            )
            job.id = cursor.lastrowid
        return job

    async def list_jobs(
        self,
        experience_level: ExperienceLevel | None = None,
        job_type: JobType | None = None,
    ) -> list[JobPosting]:
        """List job postings matching the optional filters, ordered by id."""
        clauses: list[str] = []
        params: list[str] = []
        if experience_level is not None:
            clauses.append("experience_level = ?")
            params.append(experience_level.value)
        if job_type is not None:
            clauses.append("job_type = ?")
            params.append(job_type.value)

        query = "SELECT * FROM jobs"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY id"

        async with self._reading() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
        return [self._row_to_job(row) for row in rows]

    async def list_jobs_by_ids(self, job_ids: Iterable[int]) -> list[JobPosting]:
        """List the job postings with the given ids (missing ids are skipped)."""
        ids = sorted(set(job_ids))
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        async with self._reading() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM jobs WHERE id IN ({placeholders}) ORDER BY id", ids
            )
            rows = await cursor.fetchall()
        return [self._row_to_job(row) for row in rows]

    async def list_jobs_by_title(self, role: str) -> list[JobPosting]:
        """List jobs whose title contains ``role``, ignoring case."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                "SELECT * FROM jobs WHERE instr(lower(title), lower(?)) > 0 ORDER BY id",
                (role.strip(),),
            )
            rows = await cursor.fetchall()
        return [self._row_to_job(row) for row in rows]

    # --- learning resources ---------------------------------------------

    async def insert_resource(self, resource: LearningResource) -> LearningResource:
        """Insert a learning resource and return it with its assigned id."""
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO learning_resources (title, related_skills, cost, platform, url)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    resource.title,
                    _dumps(resource.related_skills),
                    resource.cost.value,
                    resource.platform,
                    resource.url,
                ),
            )
            resource.id = cursor.lastrowid
        return resource

    async def list_resources(
        self, cost: ResourceCost | None = None
    ) -> list[LearningResource]:
        """List learning resources, optionally only free or only paid ones."""
        async with self._reading() as conn:
            if cost is not None:
                cursor = await conn.execute(
                    "SELECT * FROM learning_resources WHERE cost = ? ORDER BY id",
                    (cost.value,),
                )
            else:
                cursor = await conn.execute(
                    "SELECT * FROM learning_resources ORDER BY id"
                )
            rows = await cursor.fetchall()

        return [
            LearningResource(
                id=row["id"],
                title=row["title"],
                related_skills=json.loads(row["related_skills"]),
                cost=ResourceCost(row["cost"]),
                platform=row["platform"],
                url=row["url"],
            )
            for row in rows
        ]

    # --- AI audit log ----------------------------------------------------

    async def insert_ai_extraction(self, record: AIExtractionRecord) -> int:
        """Append an audit entry. Entries are never updated or deduplicated."""
        record.created_at = record.created_at or _now()
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO ai_extractions (
                    user_id, extraction_type, provider, input_text, raw_output,
                    extracted_data, status, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.user_id,
                    record.extraction_type,
                    record.provider,
                    record.input_text,
                    record.raw_output,
                    _dumps(record.extracted_data)
                    if record.extracted_data is not None
                    else None,
                    record.status,
                    record.created_at.isoformat(),
                ),
            )
            record.id = cursor.lastrowid
        return record.id

    async def list_ai_extractions(self, user_id: str) -> list[AIExtractionRecord]:
        """List a user's audit entries, oldest first."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                "SELECT * FROM ai_extractions WHERE user_id = ? ORDER BY id",
                (user_id,),
            )
            rows = await cursor.fetchall()

        return [
            AIExtractionRecord(
                id=row["id"],
                user_id=row["user_id"],
                extraction_type=row["extraction_type"],
                provider=row["provider"],
                input_text=row["input_text"],
                raw_output=row["raw_output"],
                extracted_data=json.loads(row["extracted_data"])
                if row["extracted_data"] is not None
                else None,
                status=row["status"],
                created_at=_parse_datetime(row["created_at"]),
            )
            for row in rows
        ]

    # --- career roadmaps -------------------------------------------------

    async def insert_roadmap(
        self,
        *,
        user_id: str,
        title: str,
        target_role: str,
        content: RoadmapContent,
        ai_provider: str,
        timeframe_months: int | None = None,
        learning_hours_per_week: int | None = None,
        current_skills: Sequence[str] = (),
    ) -> CareerRoadmap:
        """Persist a new roadmap with zero progress."""
        now = _now()
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO career_roadmaps (
                    user_id, title, target_role, roadmap_data, ai_provider,
                    timeframe_months, learning_hours_per_week, current_skills,
                    progress_percentage, completed_phases, notes,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, '[]', NULL, ?, ?)
                """,
                (
                    user_id,
                    title,
                    target_role,
                    content.model_dump_json(),
                    ai_provider,
                    timeframe_months,
                    learning_hours_per_week,
                    _dumps(list(current_skills)),
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
            roadmap_id = cursor.lastrowid

        return CareerRoadmap(
            id=roadmap_id,
            user_id=user_id,
            title=title,
            target_role=target_role,
            content=content,
            ai_provider=ai_provider,
            timeframe_months=timeframe_months,
            learning_hours_per_week=learning_hours_per_week,
            current_skills=list(current_skills),
            created_at=now,
            updated_at=now,
        )

    async def get_roadmap(self, roadmap_id: int, user_id: str) -> CareerRoadmap | None:
        """Get a roadmap by id, only if ``user_id`` owns it."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                "SELECT * FROM career_roadmaps WHERE id = ? AND user_id = ?",
                (roadmap_id, user_id),
            )
            row = await cursor.fetchone()
        return self._row_to_roadmap(row) if row is not None else None

    async def list_roadmaps(self, user_id: str) -> list[CareerRoadmap]:
        """List a user's roadmaps, newest first."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM career_roadmaps
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                """,
                (user_id,),
            )
            rows = await cursor.fetchall()
        return [self._row_to_roadmap(row) for row in rows]

    async def update_roadmap_progress(
        self,
        roadmap_id: int,
        user_id: str,
        progress_percentage: int,
        completed_phases: Iterable[int],
        notes: str | None,
    ) -> CareerRoadmap | None:
        """Replace a roadmap's progress fields in a single UPDATE.

        Returns:
            The updated roadmap, or None if no roadmap with that id is
            owned by ``user_id`` (in which case nothing is written).
        """
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE career_roadmaps
                SET progress_percentage = ?, completed_phases = ?, notes = ?,
                    updated_at = ?
                WHERE id = ? AND user_id = ?
                """,
                (
                    progress_percentage,
                    _dumps(sorted(set(completed_phases))),
                    notes,
                    _now().isoformat(),
                    roadmap_id,
                    user_id,
                ),
            )
            if cursor.rowcount == 0:
                return None

            cursor = await conn.execute(
                "SELECT * FROM career_roadmaps WHERE id = ?", (roadmap_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_roadmap(row)

    async def delete_roadmap(self, roadmap_id: int, user_id: str) -> bool:
        """Hard-delete a roadmap. Returns False if it was not owned/found."""
        async with self._transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM career_roadmaps WHERE id = ? AND user_id = ?",
                (roadmap_id, user_id),
            )
            deleted = cursor.rowcount > 0
        return deleted

    # --- row conversion --------------------------------------------------

    def _row_to_user(self, row: aiosqlite.Row) -> User:
        level = row["experience_level"]
        return User(
            id=row["id"],
            full_name=row["full_name"],
            email=row["email"],
            skills=json.loads(row["skills"]),
            target_roles=json.loads(row["target_roles"]),
            experience_level=ExperienceLevel(level) if level else None,
            onboarding_completed=bool(row["onboarding_completed"]),
            raw_cv_text=row["raw_cv_text"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def _row_to_job(self, row: aiosqlite.Row) -> JobPosting:
        return JobPosting(
            id=row["id"],
            title=row["title"],
            company=row["company"],
            required_skills=json.loads(row["required_skills"]),
            experience_level=ExperienceLevel(row["experience_level"]),
            job_type=JobType(row["job_type"]),
            location=row["location"],
            description=row["description"],
            salary_min=row["salary_min"],
            salary_max=row["salary_max"],
        )

    def _row_to_roadmap(self, row: aiosqlite.Row) -> CareerRoadmap:
        return CareerRoadmap(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            target_role=row["target_role"],
            content=RoadmapContent.model_validate_json(row["roadmap_data"]),
            ai_provider=row["ai_provider"],
            timeframe_months=row["timeframe_months"],
            learning_hours_per_week=row["learning_hours_per_week"],
            current_skills=json.loads(row["current_skills"]),
            progress_percentage=row["progress_percentage"],
            completed_phases=set(json.loads(row["completed_phases"])),
            notes=row["notes"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )
