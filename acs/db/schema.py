"""Database schema definitions."""

from __future__ import annotations

import sqlite3

GAME_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS games (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

PLAYER_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS players (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    tier INTEGER NOT NULL,
    score REAL NOT NULL DEFAULT 0,
    game_id INTEGER,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (game_id) REFERENCES games(id) ON DELETE SET NULL
);
"""

PLAYER_INDEXES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_players_name ON players (name);",
    "CREATE INDEX IF NOT EXISTS idx_players_game ON players (game_id);",
]

TOURNAMENT_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS tournaments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    game_id INTEGER,
    is_finished INTEGER NOT NULL DEFAULT 0,
    winner_team_number INTEGER,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (game_id) REFERENCES games(id) ON DELETE SET NULL
);
"""

TOURNAMENT_PLAYER_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS tournament_players (
    tournament_id INTEGER NOT NULL,
    player_id INTEGER NOT NULL,
    position INTEGER NOT NULL,
    PRIMARY KEY (tournament_id, player_id),
    FOREIGN KEY (tournament_id) REFERENCES tournaments(id) ON DELETE CASCADE,
    FOREIGN KEY (player_id) REFERENCES players(id) ON DELETE RESTRICT
);
"""

TEAM_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS teams (
    tournament_id INTEGER NOT NULL,
    team_number INTEGER NOT NULL,
    PRIMARY KEY (tournament_id, team_number),
    CHECK (team_number >= 1),
    FOREIGN KEY (tournament_id) REFERENCES tournaments(id) ON DELETE CASCADE
);
"""

TEAM_MEMBER_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS team_members (
    tournament_id INTEGER NOT NULL,
    team_number INTEGER NOT NULL,
    position INTEGER NOT NULL,
    player_id INTEGER NOT NULL,
    UNIQUE (tournament_id, player_id),
    FOREIGN KEY (tournament_id, team_number)
        REFERENCES teams(tournament_id, team_number) ON DELETE CASCADE,
    FOREIGN KEY (player_id) REFERENCES players(id) ON DELETE RESTRICT
);
"""

TEAM_INDEXES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_team_members_team ON team_members (tournament_id, team_number);",
]

AUDIT_LOG_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS audit_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_type TEXT NOT NULL,
    summary TEXT NOT NULL,
    level TEXT NOT NULL DEFAULT 'info',
    tournament_id INTEGER,
    player_id INTEGER,
    context_json TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

AUDIT_LOG_INDEXES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_audit_log_tournament ON audit_log (tournament_id);",
    "CREATE INDEX IF NOT EXISTS idx_audit_log_player ON audit_log (player_id);",
]


SCHEMA_SQL = [
    GAME_TABLE_SQL,
    PLAYER_TABLE_SQL,
    TOURNAMENT_TABLE_SQL,
    TOURNAMENT_PLAYER_TABLE_SQL,
    TEAM_TABLE_SQL,
    TEAM_MEMBER_TABLE_SQL,
    AUDIT_LOG_TABLE_SQL,
    *PLAYER_INDEXES_SQL,
    *TEAM_INDEXES_SQL,
    *AUDIT_LOG_INDEXES_SQL,
]


def initialize_schema(connection: sqlite3.Connection) -> None:
    """Initialize database schema if needed."""
    with connection:
        for statement in SCHEMA_SQL:
            connection.execute(statement)
