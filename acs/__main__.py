"""
acs - command line for the tournament team engine.

Usage:
    python -m acs add-player <name> <tier> [--game ID]
    python -m acs create-tournament <name> --players 1 2 3 [--game ID]
    python -m acs generate-teams <tournament_id> [--teams N]
    python -m acs record-scores <tournament_id> 1:10 2:-3
    python -m acs finish <tournament_id> <team_number>
    python -m acs ranking [--group-by name|id]
    python -m acs config default_team_count 3
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from acs import settings
from acs.db.database import get_connection
from acs.errors import AcsError, InvalidInputError
from acs.services.audit_log import AuditLogService
from acs.services.batch_export import BatchExportService
from acs.services.import_roster import import_roster
from acs.services.ranking import RankingService
from acs.services.roster import RosterService
from acs.services.scores import ScoreService
from acs.services.tournaments import TournamentService

logger = logging.getLogger(__name__)


def _print_tournament(tournament) -> None:
    status = "finished" if tournament.is_finished else "open"
    print(f"#{tournament.id} {tournament.name} [{status}] players={tournament.player_ids}")
    for team in tournament.teams:
        marker = " (winner)" if team.team_number == tournament.winner_team_number else ""
        print(f"  team {team.team_number}{marker}: {list(team.player_ids)}")


def _parse_team_score(text: str) -> tuple[str, str]:
    team_number, sep, score = text.partition(":")
    if not sep:
        raise InvalidInputError(f"Expected TEAM:SCORE, got {text!r}")
    return team_number, score


def cmd_init_db(args, connection):
    logger.info("Database ready at %s", args.db or "default location")
    return 0


def cmd_add_game(args, connection):
    game_id = RosterService(connection).add_game(args.name, args.description)
    print(game_id)
    return 0


def cmd_add_player(args, connection):
    player = RosterService(connection).add_player(args.name, args.tier, game_id=args.game)
    print(f"#{player.id} {player.name} tier={player.tier}")
    return 0


def cmd_list_players(args, connection):
    for player in RosterService(connection).list_players(game_id=args.game):
        print(f"#{player.id} {player.name} tier={player.tier} score={player.score}")
    return 0


def cmd_update_player(args, connection):
    player = RosterService(connection).update_player(args.player_id, name=args.name, tier=args.tier)
    print(f"#{player.id} {player.name} tier={player.tier}")
    return 0


def cmd_create_tournament(args, connection):
    tournament = TournamentService(connection).create(args.name, game_id=args.game, player_ids=args.players)
    _print_tournament(tournament)
    return 0


def cmd_register(args, connection):
    _print_tournament(TournamentService(connection).register_players(args.tournament_id, args.players))
    return 0


def cmd_show(args, connection):
    _print_tournament(TournamentService(connection).get(args.tournament_id))
    return 0


def cmd_generate_teams(args, connection):
    _print_tournament(TournamentService(connection).generate_teams(args.tournament_id, args.teams))
    return 0


def cmd_edit_teams(args, connection):
    teams = json.loads(Path(args.teams_file).read_text(encoding="utf-8"))
    _print_tournament(TournamentService(connection).update_teams(args.tournament_id, teams))
    return 0


def cmd_record_scores(args, connection):
    entries = [_parse_team_score(item) for item in args.scores]
    application = ScoreService(connection).record_team_scores(args.tournament_id, entries)
    print(f"updated {len(application.deltas)} players")
    if application.skipped_team_numbers:
        logger.warning("Skipped unknown teams: %s", application.skipped_team_numbers)
    return 0


def cmd_adjust_score(args, connection):
    player = ScoreService(connection).adjust_player_score(args.player_id, args.delta)
    print(f"#{player.id} {player.name} score={player.score}")
    return 0


def cmd_finish(args, connection):
    _print_tournament(TournamentService(connection).finish(args.tournament_id, args.team_number))
    return 0


def cmd_delete_tournament(args, connection):
    TournamentService(connection).delete(args.tournament_id)
    return 0


def cmd_finished(args, connection):
    for item in TournamentService(connection).list_finished():
        winners = list(item.winning_team.player_ids) if item.winning_team else []
        print(
            f"#{item.tournament.id} {item.tournament.name} ({item.game_name or '-'}) "
            f"winner=team {item.tournament.winner_team_number} {winners} score={item.winning_score}"
        )
    return 0


def cmd_ranking(args, connection):
    for place, entry in enumerate(RankingService(connection).ranking(group_by=args.group_by), start=1):
        print(f"{place:>3}. {entry.name:<24} {entry.total_score:>8} games={entry.games_count}")
    return 0


def cmd_import_roster(args, connection):
    report = import_roster(connection=connection, file_path=args.path, default_game=args.game)
    print(f"created {len(report.players_created)} players")
    for error in report.errors:
        logger.warning(error)
    return 1 if report.errors and not report.players_created else 0


def cmd_export(args, connection):
    result = BatchExportService(connection).export_all(args.directory, group_by=args.group_by)
    for path in result.files_created:
        print(path)
    return 0


def cmd_audit_log(args, connection):
    service = AuditLogService(connection)
    events = service.history(
        event_type=args.event_type,
        tournament_id=args.tournament,
        player_id=args.player,
        limit=args.limit,
    )
    if args.output:
        print(service.write_report(args.output, events))
        return 0
    for event in events:
        print(event.format_line())
    return 0


def cmd_config(args, connection):
    if args.key:
        if args.value is None:
            raise InvalidInputError(f"Missing value for {args.key}")
        settings.set_setting(args.key, args.value)
    for key, value in settings.current_settings().items():
        print(f"{key}={value}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="acs", description="Tournament team formation and ranking")
    parser.add_argument("--db", default=None, help="SQLite database path (default: ACS_DB_PATH or user data dir)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sub = subparsers.add_parser("init-db", help="Create the database schema")
    sub.set_defaults(func=cmd_init_db)

    sub = subparsers.add_parser("add-game", help="Add a game")
    sub.add_argument("name")
    sub.add_argument("--description", default=None)
    sub.set_defaults(func=cmd_add_game)

    sub = subparsers.add_parser("add-player", help="Add a player")
    sub.add_argument("name")
    sub.add_argument("tier", help="Skill tier (1 = strongest)")
    sub.add_argument("--game", type=int, default=None, help="Game id")
    sub.set_defaults(func=cmd_add_player)

    sub = subparsers.add_parser("list-players", help="List players")
    sub.add_argument("--game", type=int, default=None, help="Only players of this game")
    sub.set_defaults(func=cmd_list_players)

    sub = subparsers.add_parser("update-player", help="Rename a player or change their tier")
    sub.add_argument("player_id", type=int)
    sub.add_argument("--name", default=None)
    sub.add_argument("--tier", default=None)
    sub.set_defaults(func=cmd_update_player)

    sub = subparsers.add_parser("create-tournament", help="Create a tournament")
    sub.add_argument("name")
    sub.add_argument("--game", type=int, default=None)
    sub.add_argument("--players", type=int, nargs="*", default=[])
    sub.set_defaults(func=cmd_create_tournament)

    sub = subparsers.add_parser("register", help="Replace the registered players of a tournament")
    sub.add_argument("tournament_id", type=int)
    sub.add_argument("players", type=int, nargs="*")
    sub.set_defaults(func=cmd_register)

    sub = subparsers.add_parser("show", help="Show a tournament and its teams")
    sub.add_argument("tournament_id", type=int)
    sub.set_defaults(func=cmd_show)

    sub = subparsers.add_parser("generate-teams", help="Generate balanced teams")
    sub.add_argument("tournament_id", type=int)
    sub.add_argument("--teams", default=None, help="Number of teams (default from settings, 2)")
    sub.set_defaults(func=cmd_generate_teams)

    sub = subparsers.add_parser("edit-teams", help="Replace teams from a JSON file")
    sub.add_argument("tournament_id", type=int)
    sub.add_argument("teams_file", help='JSON list of {"team_number": 1, "players": [ids]}')
    sub.set_defaults(func=cmd_edit_teams)

    sub = subparsers.add_parser("record-scores", help="Record round scores per team")
    sub.add_argument("tournament_id", type=int)
    sub.add_argument("scores", nargs="+", help="TEAM:SCORE pairs, e.g. 1:10 2:-3")
    sub.set_defaults(func=cmd_record_scores)

    sub = subparsers.add_parser("adjust-score", help="Add a signed delta to one player's score")
    sub.add_argument("player_id", type=int)
    sub.add_argument("delta")
    sub.set_defaults(func=cmd_adjust_score)

    sub = subparsers.add_parser("finish", help="Mark a tournament finished")
    sub.add_argument("tournament_id", type=int)
    sub.add_argument("team_number", type=int)
    sub.set_defaults(func=cmd_finish)

    sub = subparsers.add_parser("delete-tournament", help="Delete an unfinished tournament")
    sub.add_argument("tournament_id", type=int)
    sub.set_defaults(func=cmd_delete_tournament)

    sub = subparsers.add_parser("finished", help="List finished tournaments")
    sub.set_defaults(func=cmd_finished)

    sub = subparsers.add_parser("ranking", help="Show the leaderboard")
    sub.add_argument("--group-by", choices=["name", "id"], default=None)
    sub.set_defaults(func=cmd_ranking)

    sub = subparsers.add_parser("import-roster", help="Import players from an .xlsx roster")
    sub.add_argument("path")
    sub.add_argument("--game", default=None, help="Game name for rows without one")
    sub.set_defaults(func=cmd_import_roster)

    sub = subparsers.add_parser("export", help="Export ranking and team sheets to .xlsx")
    sub.add_argument("directory")
    sub.add_argument("--group-by", choices=["name", "id"], default=None)
    sub.set_defaults(func=cmd_export)

    sub = subparsers.add_parser("audit-log", help="Show or export the audit log")
    sub.add_argument("--event-type", default=None)
    sub.add_argument("--tournament", type=int, default=None, help="Only events about this tournament")
    sub.add_argument("--player", type=int, default=None, help="Only events about this player")
    sub.add_argument("--limit", type=int, default=None)
    sub.add_argument("--output", default=None, help="Write to a text file instead")
    sub.set_defaults(func=cmd_audit_log)

    sub = subparsers.add_parser("config", help="Show settings, or store one: config KEY VALUE")
    sub.add_argument("key", nargs="?", help=", ".join(settings.SETTING_KEYS))
    sub.add_argument("value", nargs="?")
    sub.set_defaults(func=cmd_config)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    connection = get_connection(args.db)
    try:
        return args.func(args, connection)
    except AcsError as exc:
        logger.error(str(exc))
        return 1
    finally:
        connection.close()


if __name__ == "__main__":
    sys.exit(main())
