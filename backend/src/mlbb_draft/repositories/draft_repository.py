"""DuckDB-based data access for heroes, rosters and saved matches."""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import duckdb
import pandas as pd

from mlbb_draft.models.hero import HeroRef, HeroRole
from mlbb_draft.models.team import RosterPlayer
from mlbb_draft.utils.lane_normalizer import sort_by_lane

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS heroes (
        name VARCHAR PRIMARY KEY,
        role VARCHAR NOT NULL,
        image_ref VARCHAR
    );
    CREATE TABLE IF NOT EXISTS players (
        team_name VARCHAR NOT NULL,
        name VARCHAR NOT NULL,
        role VARCHAR,
        is_substitute BOOLEAN DEFAULT FALSE,
        substitute_order INTEGER
    );
    CREATE TABLE IF NOT EXISTS matches (
        id VARCHAR PRIMARY KEY,
        match_date VARCHAR,
        blue_team VARCHAR,
        red_team VARCHAR,
        winner VARCHAR,
        payload VARCHAR NOT NULL,
        created_at TIMESTAMP NOT NULL
    );
"""


class DraftRepository:
    """Data access layer - DuckDB queries against a local database file."""

    def __init__(self, database_path: str | Path, create: bool = False):
        """Initialize with path to DuckDB database.

        Args:
            database_path: Path to the .duckdb file
                          (built from CSV files by scripts/build_duckdb.py)
            create: Create an empty database with the schema if missing

        Raises:
            FileNotFoundError: If the database doesn't exist and create is False
        """
        self._db_path = Path(database_path)

        if not self._db_path.exists() and not create:
            raise FileNotFoundError(
                f"DuckDB database not found: {self._db_path}\n"
                f"Run: cd backend && python scripts/build_duckdb.py"
            )

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        with duckdb.connect(str(self._db_path)) as conn:
            for statement in SCHEMA.split(";"):
                if statement.strip():
                    conn.execute(statement)
            tables = conn.execute("SHOW TABLES").fetchall()
        logger.info(f"DraftRepository: Using {self._db_path} ({len(tables)} tables)")

    def _query(self, sql: str, params: Optional[list] = None) -> list[dict]:
        """Execute a read query and return a list of JSON-friendly dicts."""
        with duckdb.connect(str(self._db_path), read_only=True) as conn:
            df = conn.execute(sql, params or []).df()

        for col in df.columns:
            if pd.api.types.is_datetime64_any_dtype(df[col]):
                df[col] = df[col].dt.strftime("%Y-%m-%dT%H:%M:%S")

        # NaN/NA -> None so callers can use plain truthiness checks
        df = df.astype(object).where(pd.notna(df), None)
        return df.to_dict(orient="records")

    def _execute(self, sql: str, params: Optional[list] = None) -> None:
        with duckdb.connect(str(self._db_path)) as conn:
            conn.execute(sql, params or [])

    # ------------------------------------------------------------------
    # Hero catalog
    # ------------------------------------------------------------------

    def get_heroes(self) -> list[HeroRef]:
        """All heroes in the catalog, sorted by name. Unknown roles are skipped."""
        heroes = []
        for row in self._query("SELECT name, role, image_ref FROM heroes ORDER BY name"):
            role = HeroRole.parse(row["role"])
            if role is None:
                logger.warning(f"Hero {row['name']} has unknown role {row['role']!r}, skipping")
                continue
            heroes.append(HeroRef(name=row["name"], role=role, image_ref=row["image_ref"] or ""))
        return heroes

    def add_hero(self, hero: HeroRef) -> None:
        self._execute(
            "INSERT OR REPLACE INTO heroes (name, role, image_ref) VALUES (?, ?, ?)",
            [hero.name, hero.role.value, hero.image_ref],
        )

    # ------------------------------------------------------------------
    # Rosters
    # ------------------------------------------------------------------

    def get_team_names(self) -> list[str]:
        rows = self._query("SELECT DISTINCT team_name FROM players ORDER BY team_name")
        return [row["team_name"] for row in rows]

    def get_roster(self, team_name: str) -> list[RosterPlayer]:
        """Registered players of a team ordered by lane, starters first.

        Teams without registered players (typical for opponents) return [].
        """
        rows = self._query(
            """
            SELECT name, role, is_substitute, substitute_order
            FROM players
            WHERE lower(team_name) = lower(?)
            ORDER BY is_substitute, substitute_order NULLS FIRST, name
            """,
            [team_name.strip()],
        )
        players = [
            RosterPlayer(
                name=row["name"],
                role=row["role"] or "",
                is_substitute=bool(row["is_substitute"]),
                substitute_order=int(row["substitute_order"]) if row["substitute_order"] is not None else None,
            )
            for row in rows
        ]
        return sort_by_lane(players)

    def add_player(self, team_name: str, player: RosterPlayer) -> None:
        self._execute(
            "INSERT INTO players (team_name, name, role, is_substitute, substitute_order) VALUES (?, ?, ?, ?, ?)",
            [team_name, player.name, player.role, player.is_substitute, player.substitute_order],
        )

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def save_match(self, payload: dict, match_id: Optional[str] = None) -> str:
        """Store an exported draft payload and return its match id.

        Passing the id of a stored match replaces that match (editing a
        saved draft); otherwise a new id is generated.
        """
        match_id = match_id or f"match_{uuid.uuid4().hex[:12]}"
        teams = {team.get("team_color"): team.get("team") for team in payload.get("teams", [])}
        self._execute(
            """
            INSERT OR REPLACE INTO matches (id, match_date, blue_team, red_team, winner, payload, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                match_id,
                payload.get("match_date"),
                teams.get("blue"),
                teams.get("red"),
                payload.get("winner"),
                json.dumps(payload),
                datetime.now(),
            ],
        )
        logger.info(f"Saved match {match_id}")
        return match_id

    def get_match(self, match_id: str) -> dict | None:
        """Stored payload of a match, with its id, or None."""
        rows = self._query("SELECT id, payload FROM matches WHERE id = ?", [match_id])
        if not rows:
            return None
        payload = json.loads(rows[0]["payload"])
        payload["id"] = rows[0]["id"]
        return payload

    def list_matches(self, team_name: Optional[str] = None, limit: int = 50) -> list[dict]:
        """Recent match summaries, optionally only those involving a team.

        Returns list of dicts with: id, match_date, blue_team, red_team, winner, created_at
        """
        sql = "SELECT id, match_date, blue_team, red_team, winner, created_at FROM matches"
        params: list = []
        if team_name:
            sql += " WHERE lower(blue_team) = lower(?) OR lower(red_team) = lower(?)"
            params.extend([team_name, team_name])
        sql += " ORDER BY created_at DESC LIMIT ?"
        params.append(limit)
        return self._query(sql, params)
