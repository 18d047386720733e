"""Main CLI entry point."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from opportunity_directory.errors import DirectoryError, ValidationError, describe_error

logger = logging.getLogger("opportunity_directory.cli")

_TYPES = ["mun", "internship", "volunteering", "summer_camp", "competition", "hackathon"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="opportunity-directory",
        description="Browse, bookmark and moderate student opportunities",
    )
    parser.add_argument("--config", type=Path, default=None, help="Settings YAML file")
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to SQLite database (overrides settings)",
    )
    parser.add_argument(
        "--token",
        type=str,
        default=os.environ.get("OPPORTUNITY_DIRECTORY_TOKEN"),
        help="Session token (default: $OPPORTUNITY_DIRECTORY_TOKEN). Local mode: your user id.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level")
    parser.add_argument("--log-level", type=str, default=None, help="Explicit log level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # list
    list_parser = subparsers.add_parser("list", help="List opportunities")
    list_parser.add_argument("--type", choices=_TYPES, default=None)
    list_parser.add_argument("--price", choices=["free", "paid"], default=None)
    list_parser.add_argument("--audience", choices=["all", "emiratis"], default=None)
    list_parser.add_argument("--format", choices=["online", "offline"], default=None)
    list_parser.add_argument("--subject", type=str, default=None, help="Case-insensitive substring")
    list_parser.add_argument(
        "--status",
        choices=["pending", "approved", "rejected", "all"],
        default="approved",
        help="Admins only for anything other than approved",
    )

    show_parser = subparsers.add_parser("show", help="Show one opportunity")
    show_parser.add_argument("id")

    submit_parser = subparsers.add_parser("submit", help="Submit an opportunity for review")
    submit_parser.add_argument("--input", type=Path, required=True, help="JSON file with fields")

    create_parser = subparsers.add_parser("create", help="Create an approved opportunity (admin)")
    create_parser.add_argument("--input", type=Path, required=True, help="JSON file with fields")

    edit_parser = subparsers.add_parser("edit", help="Edit an opportunity (admin)")
    edit_parser.add_argument("id")
    edit_parser.add_argument("--input", type=Path, required=True, help="JSON file with changed fields")

    for name, help_text in (
        ("approve", "Approve a pending opportunity (admin)"),
        ("reject", "Reject a pending opportunity (admin)"),
        ("delete", "Delete an opportunity permanently (admin)"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("id")

    subparsers.add_parser("pending", help="Moderation queue (admin)")
    subparsers.add_parser("stats", help="Counts per status (admin)")

    # bookmark
    bookmark_parser = subparsers.add_parser("bookmark", help="Manage your bookmarks")
    bookmark_parser.add_argument("action", choices=["add", "remove", "list"])
    bookmark_parser.add_argument("id", nargs="?", default=None, help="Opportunity id (add/remove)")
    bookmark_parser.add_argument(
        "--full",
        action="store_true",
        help="list: print bookmarked opportunities instead of ids",
    )

    # profile
    profile_parser = subparsers.add_parser("profile", help="Profiles and roles")
    profile_parser.add_argument("action", choices=["show", "create", "promote"])
    profile_parser.add_argument("user_id", nargs="?", default=None)
    profile_parser.add_argument("--role", choices=["admin", "student"], default="admin")
    profile_parser.add_argument("--full-name", type=str, default="")
    profile_parser.add_argument("--email", type=str, default="")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = build_parser()
    args = parser.parse_args(argv)

    from opportunity_directory.api import Directory
    from opportunity_directory.config import Settings

    settings = Settings.load(args.config)
    if args.db is not None:
        settings = settings.model_copy(update={"db_path": args.db})
    _configure_logging(args, settings)

    handlers = {
        "list": _run_list,
        "show": _run_show,
        "submit": _run_submit,
        "create": _run_create,
        "edit": _run_edit,
        "approve": _run_moderate,
        "reject": _run_moderate,
        "delete": _run_delete,
        "pending": _run_pending,
        "stats": _run_stats,
        "bookmark": _run_bookmark,
        "profile": _run_profile,
    }
    try:
        directory = Directory.from_settings(settings)
        handlers[args.command](directory, args)
    except DirectoryError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(describe_error(e), file=sys.stderr)
        raise SystemExit(2 if isinstance(e, ValidationError) else 1)


def _configure_logging(args: argparse.Namespace, settings) -> None:
    level_name = args.log_level or ("INFO" if args.verbose else settings.log_level)
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _read_json(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SystemExit(f"Cannot read {path}: {e}")
    if not isinstance(data, dict):
        raise SystemExit(f"{path} must contain a JSON object")
    return data


def _viewer(directory, args: argparse.Namespace):
    """Signed-in context when a token is given, anonymous otherwise."""
    from opportunity_directory.auth import AuthorizationContext

    if args.token:
        return directory.sign_in(args.token)
    return AuthorizationContext.anonymous()


def _run_list(directory, args: argparse.Namespace) -> None:
    flt = {
        "type": args.type,
        "price": args.price,
        "audience": args.audience,
        "format": args.format,
        "subject": args.subject,
    }
    opps = directory.list_opportunities(flt, _viewer(directory, args), status=args.status)
    _print_json([o.model_dump(mode="json") for o in opps])


def _run_show(directory, args: argparse.Namespace) -> None:
    opp = directory.get_opportunity(args.id, _viewer(directory, args))
    _print_json(opp.model_dump(mode="json"))


def _run_submit(directory, args: argparse.Namespace) -> None:
    user = directory.sign_in(args.token)
    opp = directory.submit_opportunity(_read_json(args.input), user)
    print(f"Submitted {opp.id}; it will be listed once an admin approves it.", file=sys.stderr)
    _print_json(opp.model_dump(mode="json"))


def _run_create(directory, args: argparse.Namespace) -> None:
    admin = directory.sign_in(args.token)
    opp = directory.create_approved_opportunity(_read_json(args.input), admin)
    _print_json(opp.model_dump(mode="json"))


def _run_edit(directory, args: argparse.Namespace) -> None:
    admin = directory.sign_in(args.token)
    opp = directory.edit_opportunity(args.id, _read_json(args.input), admin)
    _print_json(opp.model_dump(mode="json"))


def _run_moderate(directory, args: argparse.Namespace) -> None:
    admin = directory.sign_in(args.token)
    if args.command == "approve":
        opp = directory.approve_opportunity(args.id, admin)
    else:
        opp = directory.reject_opportunity(args.id, admin)
    print(f"{opp.id}: {opp.status.value}")


def _run_delete(directory, args: argparse.Namespace) -> None:
    admin = directory.sign_in(args.token)
    directory.delete_opportunity(args.id, admin)
    print(f"Deleted {args.id}")


def _run_pending(directory, args: argparse.Namespace) -> None:
    admin = directory.sign_in(args.token)
    _print_json([o.model_dump(mode="json") for o in directory.pending_opportunities(admin)])


def _run_stats(directory, args: argparse.Namespace) -> None:
    admin = directory.sign_in(args.token)
    counts = directory.status_counts(admin)
    total = sum(counts.values())
    print(f"--- Opportunities: {total} total ---")
    for status, count in counts.items():
        print(f"  {status}: {count}")


def _run_bookmark(directory, args: argparse.Namespace) -> None:
    user = directory.sign_in(args.token)
    if args.action in ("add", "remove") and not args.id:
        raise SystemExit(f"bookmark {args.action} requires an opportunity id")

    if args.action == "add":
        created = directory.add_bookmark(user, args.id)
        print("Added to bookmarks" if created else "Already bookmarked")
    elif args.action == "remove":
        directory.remove_bookmark(user, args.id)
        print("Removed from bookmarks")
    elif args.full:
        _print_json([o.model_dump(mode="json") for o in directory.bookmarked_opportunities(user)])
    else:
        _print_json(sorted(directory.list_bookmarks(user)))


def _run_profile(directory, args: argparse.Namespace) -> None:
    from opportunity_directory.models.profile import Role

    if args.action == "show":
        ctx = directory.sign_in(args.token)
        _print_json(ctx.profile.model_dump(mode="json"))
        return

    if not args.user_id:
        raise SystemExit(f"profile {args.action} requires a user id")
    if args.action == "create":
        profile = directory.profiles.ensure(args.user_id, full_name=args.full_name, email=args.email)
    else:
        profile = directory.profiles.set_role(args.user_id, Role(args.role))
    _print_json(profile.model_dump(mode="json"))


if __name__ == "__main__":
    main()
