"""SQLite record store for jobs, companies, leads, exports, presets and the queue."""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from src.core.schemas import (
    Company,
    ExportLog,
    Job,
    JobStatus,
    Lead,
    QueueEntry,
    SearchPreset,
    SearchSpecification,
)
from src.pipeline.classifier import is_agency

_JOBS_TABLE = """
CREATE TABLE IF NOT EXISTS jobs (
    id                   TEXT    PRIMARY KEY,
    status               TEXT    NOT NULL DEFAULT 'pending',
    search_criteria      TEXT    NOT NULL,
    total_listings_found INTEGER NOT NULL DEFAULT 0,
    leads_generated      INTEGER NOT NULL DEFAULT 0,
    progress             INTEGER NOT NULL DEFAULT 0,
    error_message        TEXT,
    created_at           TEXT    NOT NULL,
    updated_at           TEXT    NOT NULL,
    completed_at         TEXT
);
"""

_COMPANIES_TABLE = """
CREATE TABLE IF NOT EXISTS companies (
    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    name                  TEXT    NOT NULL,
    linkedin_url          TEXT    NOT NULL DEFAULT '',
    domain                TEXT    NOT NULL DEFAULT '',
    industry              TEXT    NOT NULL DEFAULT '',
    size                  TEXT    NOT NULL DEFAULT '',
    location              TEXT    NOT NULL DEFAULT '',
    is_recruitment_agency INTEGER NOT NULL DEFAULT 0,
    is_blacklisted        INTEGER NOT NULL DEFAULT 0,
    created_at            TEXT    NOT NULL,
    updated_at            TEXT    NOT NULL
);
"""

_LEADS_TABLE = """
CREATE TABLE IF NOT EXISTS leads (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    job_id              TEXT    NOT NULL REFERENCES jobs(id),
    company_id          INTEGER REFERENCES companies(id),
    full_name           TEXT    NOT NULL DEFAULT '',
    first_name          TEXT    NOT NULL DEFAULT '',
    last_name           TEXT    NOT NULL DEFAULT '',
    title               TEXT    NOT NULL DEFAULT '',
    email               TEXT    NOT NULL DEFAULT '',
    profile_url         TEXT    NOT NULL DEFAULT '',
    job_title           TEXT    NOT NULL,
    job_url             TEXT    NOT NULL,
    job_location        TEXT    NOT NULL DEFAULT '',
    job_description     TEXT    NOT NULL DEFAULT '',
    job_salary          TEXT    NOT NULL DEFAULT '',
    job_posted_date     TEXT    NOT NULL DEFAULT '',
    lead_score          INTEGER NOT NULL DEFAULT 0,
    is_qualified        INTEGER NOT NULL DEFAULT 1,
    qualification_notes TEXT    NOT NULL DEFAULT '',
    exported_to_sheets  INTEGER NOT NULL DEFAULT 0,
    exported_at         TEXT,
    created_at          TEXT    NOT NULL
);
"""

_EXPORT_LOGS_TABLE = """
CREATE TABLE IF NOT EXISTS export_logs (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    job_id         TEXT    NOT NULL REFERENCES jobs(id),
    sheet_id       TEXT    NOT NULL DEFAULT '',
    sheet_url      TEXT    NOT NULL DEFAULT '',
    leads_exported INTEGER NOT NULL,
    status         TEXT    NOT NULL,
    error_message  TEXT,
    created_at     TEXT    NOT NULL
);
"""

_SEARCH_PRESETS_TABLE = """
CREATE TABLE IF NOT EXISTS search_presets (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL UNIQUE,
    description TEXT    NOT NULL DEFAULT '',
    criteria    TEXT    NOT NULL,
    is_default  INTEGER NOT NULL DEFAULT 0,
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL
);
"""

_QUEUE_TABLE = """
CREATE TABLE IF NOT EXISTS queue_entries (
    job_id           TEXT    PRIMARY KEY REFERENCES jobs(id),
    state            TEXT    NOT NULL DEFAULT 'waiting',
    attempts_made    INTEGER NOT NULL DEFAULT 0,
    max_attempts     INTEGER NOT NULL DEFAULT 1,
    cancel_requested INTEGER NOT NULL DEFAULT 0,
    failed_reason    TEXT,
    enqueued_at      TEXT    NOT NULL,
    started_at       TEXT,
    finished_at      TEXT
);
"""

_LEADS_JOB_INDEX = "CREATE INDEX IF NOT EXISTS idx_leads_job_id ON leads(job_id);"
_COMPANIES_NAME_INDEX = "CREATE INDEX IF NOT EXISTS idx_companies_name ON companies(name);"

# Columns update_job() is allowed to touch.
_JOB_UPDATABLE = frozenset({
    "status",
    "total_listings_found",
    "leads_generated",
    "progress",
    "error_message",
    "completed_at",
})


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    for ddl in (
        _JOBS_TABLE,
        _COMPANIES_TABLE,
        _LEADS_TABLE,
        _EXPORT_LOGS_TABLE,
        _SEARCH_PRESETS_TABLE,
        _QUEUE_TABLE,
        _LEADS_JOB_INDEX,
        _COMPANIES_NAME_INDEX,
    ):
        conn.execute(ddl)
    conn.commit()
    return conn


def ping(conn: sqlite3.Connection) -> int:
    """Cheap connectivity check. Returns the number of stored jobs."""
    return int(conn.execute("SELECT COUNT(*) FROM jobs").fetchone()[0])


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


def create_job(
    conn: sqlite3.Connection,
    job_id: str,
    search: SearchSpecification,
) -> Job:
    """Insert a new job in the pending state."""
    now = datetime.now()
    conn.execute(
        """
        INSERT INTO jobs (id, status, search_criteria, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (job_id, JobStatus.PENDING.value, search.model_dump_json(),
         now.isoformat(), now.isoformat()),
    )
    conn.commit()
    job = get_job(conn, job_id)
    assert job is not None
    return job


def get_job(conn: sqlite3.Connection, job_id: str) -> Job | None:
    row = conn.execute("SELECT * FROM jobs WHERE id = ?", (job_id,)).fetchone()
    return _job_from_row(row) if row is not None else None


def list_recent_jobs(conn: sqlite3.Connection, limit: int = 50) -> list[Job]:
    """Most recently created jobs first."""
    rows = conn.execute(
        "SELECT * FROM jobs ORDER BY created_at DESC, rowid DESC LIMIT ?",
        (limit,),
    ).fetchall()
    return [_job_from_row(r) for r in rows]


def update_job(conn: sqlite3.Connection, job_id: str, **fields: Any) -> None:
    """Apply a partial update. updated_at is always bumped."""
    unknown = set(fields) - _JOB_UPDATABLE
    if unknown:
        msg = f"Unknown job fields: {sorted(unknown)}"
        raise ValueError(msg)
    assignments = [f"{name} = ?" for name in fields]
    values = [_to_sql(v) for v in fields.values()]
    assignments.append("updated_at = ?")
    values.append(datetime.now().isoformat())
    conn.execute(
        f"UPDATE jobs SET {', '.join(assignments)} WHERE id = ?",  # noqa: S608
        (*values, job_id),
    )
    conn.commit()


def start_job(conn: sqlite3.Connection, job_id: str) -> bool:
    """Move a job to running. Returns False if it is missing or already terminal."""
    cursor = conn.execute(
        """
        UPDATE jobs SET status = 'running', updated_at = ?
        WHERE id = ? AND status IN ('pending', 'running')
        """,
        (datetime.now().isoformat(), job_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def update_job_progress(
    conn: sqlite3.Connection,
    job_id: str,
    *,
    progress: int | None = None,
    total_listings_found: int | None = None,
    leads_generated: int | None = None,
) -> bool:
    """Record progress for a running job.

    Progress and the two counters never move backwards. Writes against a job
    that is no longer running are ignored and return False.
    """
    cursor = conn.execute(
        """
        UPDATE jobs SET
            progress = MAX(progress, COALESCE(?, progress)),
            total_listings_found = MAX(total_listings_found, COALESCE(?, total_listings_found)),
            leads_generated = MAX(leads_generated, COALESCE(?, leads_generated)),
            updated_at = ?
        WHERE id = ? AND status = 'running'
        """,
        (progress, total_listings_found, leads_generated,
         datetime.now().isoformat(), job_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def finish_job(
    conn: sqlite3.Connection,
    job_id: str,
    status: JobStatus,
    *,
    error_message: str | None = None,
    leads_generated: int | None = None,
) -> bool:
    """Move a job to a terminal state, exactly once.

    Only pending or running jobs can finish; returns False otherwise.
    Completing forces progress to 100.
    """
    if not status.is_terminal:
        msg = f"{status.value} is not a terminal status"
        raise ValueError(msg)
    now = datetime.now().isoformat()
    cursor = conn.execute(
        """
        UPDATE jobs SET
            status = ?,
            error_message = ?,
            progress = CASE WHEN ? = 'completed' THEN 100 ELSE progress END,
            leads_generated = MAX(leads_generated, COALESCE(?, leads_generated)),
            completed_at = ?,
            updated_at = ?
        WHERE id = ? AND status IN ('pending', 'running')
        """,
        (status.value, error_message, status.value, leads_generated, now, now, job_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def record_cancelled_lead_count(conn: sqlite3.Connection, job_id: str, leads_generated: int) -> bool:
    """Bring leads_generated of a cancelled job up to the persisted lead count.

    A running job can be cancelled while its worker is still writing a lead;
    the worker calls this once it stops. The counter never decreases.
    """
    cursor = conn.execute(
        """
        UPDATE jobs SET leads_generated = MAX(leads_generated, ?), updated_at = ?
        WHERE id = ? AND status = 'cancelled'
        """,
        (leads_generated, datetime.now().isoformat(), job_id),
    )
    conn.commit()
    return cursor.rowcount > 0


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------


def get_company_by_name(conn: sqlite3.Connection, name: str) -> Company | None:
    """Exact-name lookup. The first row created for a name wins."""
    row = conn.execute(
        "SELECT * FROM companies WHERE name = ? ORDER BY id LIMIT 1",
        (name,),
    ).fetchone()
    return _company_from_row(row) if row is not None else None


def get_or_create_company(
    conn: sqlite3.Connection,
    name: str,
    *,
    is_recruitment_agency: bool,
) -> Company:
    """Return the company with this exact name, inserting it if missing.

    is_recruitment_agency is only written on insert; existing rows keep
    whatever was classified when they were first seen.
    """
    existing = get_company_by_name(conn, name)
    if existing is not None:
        return existing
    now = datetime.now().isoformat()
    cursor = conn.execute(
        """
        INSERT INTO companies (name, is_recruitment_agency, created_at, updated_at)
        VALUES (?, ?, ?, ?)
        """,
        (name, int(is_recruitment_agency), now, now),
    )
    conn.commit()
    row = conn.execute("SELECT * FROM companies WHERE id = ?", (cursor.lastrowid,)).fetchone()
    return _company_from_row(row)


def set_company_blacklisted(
    conn: sqlite3.Connection,
    name: str,
    blacklisted: bool = True,
) -> int:
    """Manually (un)blacklist every company row with this exact name.

    Creates the row when the company has not been seen yet, so a name can be
    blacklisted ahead of time. A new row is classified with is_agency like any
    other first sighting. Returns the number of rows affected.
    """
    now = datetime.now().isoformat()
    cursor = conn.execute(
        "UPDATE companies SET is_blacklisted = ?, updated_at = ? WHERE name = ?",
        (int(blacklisted), now, name),
    )
    affected = cursor.rowcount
    if affected == 0 and blacklisted:
        conn.execute(
            """
            INSERT INTO companies
                (name, is_recruitment_agency, is_blacklisted, created_at, updated_at)
            VALUES (?, ?, 1, ?, ?)
            """,
            (name, int(is_agency(name)), now, now),
        )
        affected = 1
    conn.commit()
    return affected


# ---------------------------------------------------------------------------
# Leads
# ---------------------------------------------------------------------------


def insert_lead(conn: sqlite3.Connection, lead: Lead) -> int:
    """Insert a lead row. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO leads
            (job_id, company_id, full_name, first_name, last_name, title, email,
             profile_url, job_title, job_url, job_location, job_description,
             job_salary, job_posted_date, lead_score, is_qualified,
             qualification_notes, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            lead.job_id,
            lead.company_id,
            lead.full_name,
            lead.first_name,
            lead.last_name,
            lead.title,
            lead.email,
            lead.profile_url,
            lead.job_title,
            lead.job_url,
            lead.job_location,
            lead.job_description,
            lead.job_salary,
            lead.job_posted_date,
            lead.lead_score,
            int(lead.is_qualified),
            lead.qualification_notes,
            lead.created_at.isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def list_leads_for_job(conn: sqlite3.Connection, job_id: str) -> list[Lead]:
    """All leads of a job in insertion order, with the company name joined in."""
    rows = conn.execute(
        """
        SELECT leads.*, COALESCE(companies.name, '') AS company_name
        FROM leads LEFT JOIN companies ON companies.id = leads.company_id
        WHERE leads.job_id = ?
        ORDER BY leads.id
        """,
        (job_id,),
    ).fetchall()
    return [_lead_from_row(r) for r in rows]


def count_leads_for_job(conn: sqlite3.Connection, job_id: str) -> int:
    row = conn.execute("SELECT COUNT(*) FROM leads WHERE job_id = ?", (job_id,)).fetchone()
    return int(row[0])


def mark_leads_exported(
    conn: sqlite3.Connection,
    job_id: str,
    exported_at: datetime | None = None,
) -> int:
    """Flag every lead of a job as exported. Returns the number of rows updated."""
    cursor = conn.execute(
        "UPDATE leads SET exported_to_sheets = 1, exported_at = ? WHERE job_id = ?",
        ((exported_at or datetime.now()).isoformat(), job_id),
    )
    conn.commit()
    return cursor.rowcount


# ---------------------------------------------------------------------------
# Export logs
# ---------------------------------------------------------------------------


def insert_export_log(
    conn: sqlite3.Connection,
    job_id: str,
    *,
    status: str,
    leads_exported: int,
    sheet_id: str = "",
    sheet_url: str = "",
    error_message: str | None = None,
) -> int:
    """Append one export attempt. Export logs are never updated."""
    cursor = conn.execute(
        """
        INSERT INTO export_logs
            (job_id, sheet_id, sheet_url, leads_exported, status, error_message, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (job_id, sheet_id, sheet_url, leads_exported, status, error_message,
         datetime.now().isoformat()),
    )
    conn.commit()
    return cursor.lastrowid or 0


def list_export_logs(conn: sqlite3.Connection, job_id: str) -> list[ExportLog]:
    rows = conn.execute(
        "SELECT * FROM export_logs WHERE job_id = ? ORDER BY id",
        (job_id,),
    ).fetchall()
    return [
        ExportLog(
            id=r["id"],
            job_id=r["job_id"],
            sheet_id=r["sheet_id"],
            sheet_url=r["sheet_url"],
            leads_exported=r["leads_exported"],
            status=r["status"],
            error_message=r["error_message"],
            created_at=datetime.fromisoformat(r["created_at"]),
        )
        for r in rows
    ]


# ---------------------------------------------------------------------------
# Search presets
# ---------------------------------------------------------------------------


def save_preset(
    conn: sqlite3.Connection,
    name: str,
    criteria: SearchSpecification,
    *,
    description: str = "",
    is_default: bool = False,
) -> SearchPreset:
    """Create or replace a named preset. At most one preset is the default."""
    now = datetime.now().isoformat()
    if is_default:
        conn.execute("UPDATE search_presets SET is_default = 0, updated_at = ?", (now,))
    conn.execute(
        """
        INSERT INTO search_presets (name, description, criteria, is_default, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(name) DO UPDATE SET
            description = excluded.description,
            criteria = excluded.criteria,
            is_default = excluded.is_default,
            updated_at = excluded.updated_at
        """,
        (name, description, criteria.model_dump_json(), int(is_default), now, now),
    )
    conn.commit()
    preset = get_preset(conn, name)
    assert preset is not None
    return preset


def get_preset(conn: sqlite3.Connection, name: str | None = None) -> SearchPreset | None:
    """Look a preset up by name, or return the default preset when name is None."""
    if name is None:
        row = conn.execute(
            "SELECT * FROM search_presets WHERE is_default = 1 LIMIT 1",
        ).fetchone()
    else:
        row = conn.execute("SELECT * FROM search_presets WHERE name = ?", (name,)).fetchone()
    return _preset_from_row(row) if row is not None else None


def list_presets(conn: sqlite3.Connection) -> list[SearchPreset]:
    rows = conn.execute("SELECT * FROM search_presets ORDER BY name").fetchall()
    return [_preset_from_row(r) for r in rows]


# ---------------------------------------------------------------------------
# Queue entries
# ---------------------------------------------------------------------------


def enqueue_entry(conn: sqlite3.Connection, job_id: str, max_attempts: int = 1) -> bool:
    """Add a job to the queue. Returns False if it was already queued."""
    cursor = conn.execute(
        """
        INSERT INTO queue_entries (job_id, state, max_attempts, enqueued_at)
        VALUES (?, 'waiting', ?, ?)
        ON CONFLICT(job_id) DO NOTHING
        """,
        (job_id, max_attempts, datetime.now().isoformat()),
    )
    conn.commit()
    return cursor.rowcount > 0


def get_queue_entry(conn: sqlite3.Connection, job_id: str) -> QueueEntry | None:
    row = conn.execute("SELECT * FROM queue_entries WHERE job_id = ?", (job_id,)).fetchone()
    return _entry_from_row(row) if row is not None else None


def list_queue_entries(
    conn: sqlite3.Connection,
    states: tuple[str, ...] = ("waiting", "active"),
) -> list[QueueEntry]:
    placeholders = ", ".join("?" for _ in states)
    rows = conn.execute(
        f"SELECT * FROM queue_entries WHERE state IN ({placeholders}) "  # noqa: S608
        "ORDER BY enqueued_at, rowid",
        states,
    ).fetchall()
    return [_entry_from_row(r) for r in rows]


def claim_next_entry(conn: sqlite3.Connection) -> QueueEntry | None:
    """Take the oldest waiting entry, mark it active and count the attempt."""
    row = conn.execute(
        "SELECT job_id FROM queue_entries WHERE state = 'waiting' "
        "ORDER BY enqueued_at, rowid LIMIT 1",
    ).fetchone()
    if row is None:
        return None
    cursor = conn.execute(
        """
        UPDATE queue_entries SET
            state = 'active',
            attempts_made = attempts_made + 1,
            started_at = ?
        WHERE job_id = ? AND state = 'waiting'
        """,
        (datetime.now().isoformat(), row["job_id"]),
    )
    conn.commit()
    if cursor.rowcount == 0:
        return None
    return get_queue_entry(conn, row["job_id"])


def set_entry_state(
    conn: sqlite3.Connection,
    job_id: str,
    state: str,
    *,
    failed_reason: str | None = None,
) -> None:
    """Record the outcome of an attempt. 'waiting' puts the entry back in line."""
    finished_at = None if state in ("waiting", "active") else datetime.now().isoformat()
    conn.execute(
        """
        UPDATE queue_entries SET state = ?, failed_reason = COALESCE(?, failed_reason),
            finished_at = ?
        WHERE job_id = ?
        """,
        (state, failed_reason, finished_at, job_id),
    )
    conn.commit()


def remove_waiting_entry(conn: sqlite3.Connection, job_id: str) -> bool:
    """Take a not-yet-started entry out of the queue."""
    cursor = conn.execute(
        """
        UPDATE queue_entries SET state = 'removed', finished_at = ?
        WHERE job_id = ? AND state = 'waiting'
        """,
        (datetime.now().isoformat(), job_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def request_entry_cancel(conn: sqlite3.Connection, job_id: str) -> bool:
    """Flag an active entry so its worker stops at the next checkpoint."""
    cursor = conn.execute(
        "UPDATE queue_entries SET cancel_requested = 1 WHERE job_id = ? AND state = 'active'",
        (job_id,),
    )
    conn.commit()
    return cursor.rowcount > 0


def is_cancel_requested(conn: sqlite3.Connection, job_id: str) -> bool:
    row = conn.execute(
        "SELECT cancel_requested FROM queue_entries WHERE job_id = ?",
        (job_id,),
    ).fetchone()
    return bool(row is not None and row["cancel_requested"])


def recover_stalled_entries(conn: sqlite3.Connection) -> int:
    """Put entries left active by a dead worker back in the queue."""
    cursor = conn.execute(
        "UPDATE queue_entries SET state = 'waiting' WHERE state = 'active'",
    )
    conn.commit()
    return cursor.rowcount


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


def _to_sql(value: Any) -> Any:
    if isinstance(value, JobStatus):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _job_from_row(row: sqlite3.Row) -> Job:
    return Job(
        id=row["id"],
        status=JobStatus(row["status"]),
        search=SearchSpecification.model_validate_json(row["search_criteria"]),
        total_listings_found=row["total_listings_found"],
        leads_generated=row["leads_generated"],
        progress=row["progress"],
        error_message=row["error_message"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
        completed_at=_dt(row["completed_at"]),
    )


def _company_from_row(row: sqlite3.Row) -> Company:
    return Company(
        id=row["id"],
        name=row["name"],
        is_recruitment_agency=bool(row["is_recruitment_agency"]),
        is_blacklisted=bool(row["is_blacklisted"]),
        linkedin_url=row["linkedin_url"],
        domain=row["domain"],
        industry=row["industry"],
        size=row["size"],
        location=row["location"],
        created_at=_dt(row["created_at"]),
    )


def _lead_from_row(row: sqlite3.Row) -> Lead:
    return Lead(
        id=row["id"],
        job_id=row["job_id"],
        company_id=row["company_id"],
        company_name=row["company_name"],
        full_name=row["full_name"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        title=row["title"],
        email=row["email"],
        profile_url=row["profile_url"],
        job_title=row["job_title"],
        job_url=row["job_url"],
        job_location=row["job_location"],
        job_description=row["job_description"],
        job_salary=row["job_salary"],
        job_posted_date=row["job_posted_date"],
        lead_score=row["lead_score"],
        is_qualified=bool(row["is_qualified"]),
        qualification_notes=row["qualification_notes"],
        exported_to_sheets=bool(row["exported_to_sheets"]),
        exported_at=_dt(row["exported_at"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _preset_from_row(row: sqlite3.Row) -> SearchPreset:
    return SearchPreset(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        criteria=SearchSpecification.model_validate_json(row["criteria"]),
        is_default=bool(row["is_default"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _entry_from_row(row: sqlite3.Row) -> QueueEntry:
    return QueueEntry(
        job_id=row["job_id"],
        state=row["state"],
        attempts_made=row["attempts_made"],
        max_attempts=row["max_attempts"],
        cancel_requested=bool(row["cancel_requested"]),
        failed_reason=row["failed_reason"],
        enqueued_at=datetime.fromisoformat(row["enqueued_at"]),
        started_at=_dt(row["started_at"]),
        finished_at=_dt(row["finished_at"]),
    )
