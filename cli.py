import argparse
import json
import os
import sys

from pydantic import ValidationError as PydanticValidationError

from config.settings import get_settings
from db import schema
from db.connection import get_connection
from models import Session
from services.directory import Directory
from services.errors import DirectoryError
from services.reporting import print_profiles
from utils.logging_setup import init_logging


def _directory(args) -> Directory:
    return Directory.from_connection(get_connection(args.db))


def _session(args) -> Session:
    if not args.email:
        raise SystemExit("--email is required for this command (or set CONNECTAI_EMAIL)")
    try:
        return Session(email=args.email)
    except PydanticValidationError:
        raise SystemExit(f"Invalid e-mail: {args.email}")


def _profile_fields(args) -> dict:
    fields = {
        "name": args.name,
        "role": args.role,
        "area": args.area,
        "city": args.city,
        "state": args.state,
        "linkedinUrl": args.linkedin_url,
        "avatarUrl": args.avatar_url,
        "linkedinAbout": getattr(args, "about", None),
    }
    return {k: v for k, v in fields.items() if v is not None}


def cmd_bootstrap(args):
    conn = get_connection(args.db)
    schema.bootstrap(conn)
    print("Schema ready")


def cmd_list(args):
    directory = _directory(args)
    session = _session(args)
    profiles = directory.list_profiles(session, search=args.search, area=args.area, city=args.city)
    if args.json:
        print(json.dumps([p.to_record() for p in profiles], indent=2, ensure_ascii=False))
        return
    print_profiles(profiles, followed=directory.followed_ids(session), me=directory.my_profile(session))


def cmd_filters(args):
    directory = _directory(args)
    print(json.dumps(directory.filter_options(_session(args)), indent=2, ensure_ascii=False))


def cmd_create(args):
    directory = _directory(args)
    profile = directory.create_profile(_session(args), _profile_fields(args))
    print(json.dumps(profile.to_record(), indent=2, ensure_ascii=False))


def cmd_update(args):
    directory = _directory(args)
    changes = _profile_fields(args)
    if not changes:
        raise SystemExit("Nothing to update")
    profile = directory.update_profile(_session(args), args.id, changes)
    print(json.dumps(profile.to_record(), indent=2, ensure_ascii=False))


def cmd_delete(args):
    directory = _directory(args)
    directory.delete_profile(_session(args), args.id)
    print(f"Deleted {args.id}")


def cmd_follow(args):
    directory = _directory(args)
    url = directory.follow_profile(_session(args), args.id)
    print(url)


def cmd_followed(args):
    directory = _directory(args)
    for profile_id in sorted(directory.followed_ids(_session(args))):
        print(profile_id)


def cmd_icebreaker(args):
    directory = _directory(args)
    print(directory.generate_icebreaker(_session(args), args.id))


def cmd_enhance(args):
    directory = _directory(args)
    result = directory.ai.enrich(args.role, args.area, linkedin_about=args.about)
    print(json.dumps(result.to_payload(), indent=2, ensure_ascii=False))


def cmd_serve(args):
    import uvicorn

    from api.main import create_app

    settings = get_settings()
    # log_config=None: uvicorn loggers propagate to the root handler from init_logging
    uvicorn.run(
        create_app(settings),
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )


def _add_profile_args(parser, required: bool) -> None:
    parser.add_argument("--name", required=required)
    parser.add_argument("--role", required=required, help="Free-text role; normalized by AI")
    parser.add_argument("--area", required=required, help="Free-text area; normalized by AI")
    parser.add_argument("--city", required=required)
    parser.add_argument("--state", required=required, help="State code, e.g. PE")
    parser.add_argument("--linkedin-url", required=required, help="https://linkedin.com/in/<profile>")
    parser.add_argument("--avatar-url", default=None, help="Photo URL (placeholder avatar when omitted)")
    parser.add_argument("--about", default=None, help="Optional LinkedIn 'about' text for enrichment")


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="ConnectAI directory CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    parser.add_argument("--email", default=os.getenv("CONNECTAI_EMAIL"), help="Session e-mail (identifies 'my' profile)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create the key-value table")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_list = sub.add_parser("list", help="List/search profiles, newest first")
    p_list.add_argument("--search", "-q", default=None, help="Substring of name, role, area or tag")
    p_list.add_argument("--area", default=None, help="Exact area ('all' for any)")
    p_list.add_argument("--city", default=None, help="Exact city ('all' for any)")
    p_list.add_argument("--json", action="store_true", help="Print raw JSON records")
    p_list.set_defaults(func=cmd_list)

    p_filters = sub.add_parser("filters", help="Show distinct areas and cities")
    p_filters.set_defaults(func=cmd_filters)

    p_create = sub.add_parser("create", help="Register a profile (runs AI enrichment)")
    _add_profile_args(p_create, required=True)
    p_create.set_defaults(func=cmd_create)

    p_update = sub.add_parser("update", help="Update fields of my profile")
    p_update.add_argument("id")
    _add_profile_args(p_update, required=False)
    p_update.set_defaults(func=cmd_update)

    p_delete = sub.add_parser("delete", help="Delete my profile (missing id is ignored)")
    p_delete.add_argument("id")
    p_delete.set_defaults(func=cmd_delete)

    p_follow = sub.add_parser("follow", help="Record an assumed follow and print the LinkedIn URL")
    p_follow.add_argument("id")
    p_follow.set_defaults(func=cmd_follow)

    p_followed = sub.add_parser("followed", help="List followed profile ids")
    p_followed.set_defaults(func=cmd_followed)

    p_ice = sub.add_parser("icebreaker", help="Generate an outreach message from my profile to another")
    p_ice.add_argument("id", help="Target profile id")
    p_ice.set_defaults(func=cmd_icebreaker)

    p_enh = sub.add_parser("enhance", help="Preview AI enrichment for a role/area")
    p_enh.add_argument("--role", required=True)
    p_enh.add_argument("--area", required=True)
    p_enh.add_argument("--about", default=None)
    p_enh.set_defaults(func=cmd_enhance)

    p_serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    try:
        args.func(args)
    except DirectoryError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
