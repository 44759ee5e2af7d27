"""
CLI (Command Line Interface).

Quick terminal commands for scripting and for checking a backend, e.g.:

    eventdesk login admin@uni.edu --institution "Uni"
    eventdesk whoami
    eventdesk events --past
    eventdesk logout
    eventdesk interactive

Note:
- The role dashboards live in eventdesk/interactive.py
- The session token survives between commands (see eventdesk/storage.py)
"""

from __future__ import annotations

import argparse
import getpass
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from eventdesk.app import App, build_app
from eventdesk.config import load_settings
from eventdesk.errors import ConfigError, EventDeskError
from eventdesk.visibility import events_for_viewer, partition_by_time

console = Console()


def _setup_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _password(args: argparse.Namespace) -> str:
    if args.password is not None:
        return args.password
    return getpass.getpass("Password: ")


def _cmd_login(args: argparse.Namespace, app: App) -> int:
    user = app.session.login(args.email, _password(args), args.institution)
    print(f"Logged in as {user.display_name} ({user.role.value})")
    return 0


def _cmd_signup(args: argparse.Namespace, app: App) -> int:
    user = app.session.signup(args.email, _password(args), args.institution)
    print(f"Administrator account created for {user.email} at {user.institution}")
    return 0


def _cmd_logout(args: argparse.Namespace, app: App) -> int:
    app.session.logout()
    print("Logged out.")
    return 0


def _cmd_whoami(args: argparse.Namespace, app: App) -> int:
    app.session.restore()
    me = app.session.identity
    if me is None:
        print("Not logged in.")
        return 1
    print(f"{me.display_name} <{me.email}> | {me.role.value} | {me.institution}")
    extra = [x for x in (me.department, me.class_level) if x]
    if extra:
        print(" / ".join(extra))
    return 0


def _cmd_institutions(args: argparse.Namespace, app: App) -> int:
    institutions = app.api.list_institutions()
    if not institutions:
        print("No institutions.")
        return 0
    for inst in institutions:
        print(inst.name)
    return 0


def _cmd_events(args: argparse.Namespace, app: App) -> int:
    """
    Print the events the current user can see (upcoming by default).
    """
    app.session.restore()
    me = app.session.identity
    if me is None:
        print("Not logged in.")
        return 1

    app.store.refresh_events(args.filter)
    upcoming, past = partition_by_time(events_for_viewer(app.store.events, me))
    events = past if args.past else upcoming
    if not events:
        print("No events.")
        return 0

    for ev in sorted(events, key=lambda e: e.date):
        when = ev.date.astimezone().strftime("%Y-%m-%d %H:%M")
        print(f"{when} | {ev.title} | {ev.location} | {ev.audience.label}")
    return 0


def _cmd_interactive(args: argparse.Namespace, app: App) -> int:
    from eventdesk.interactive import run_interactive

    run_interactive(app)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="eventdesk", description="EventDesk CLI")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests and session changes")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("login", "Log in"), ("signup", "Create an administrator account")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("email", type=str, help="Email address")
        p.add_argument("--institution", "-i", type=str, required=True, help="Institution name")
        p.add_argument("--password", type=str, default=None, help="Password (prompted if omitted)")

    sub.add_parser("logout", help="Forget the stored session")
    sub.add_parser("whoami", help="Show the logged-in user")
    sub.add_parser("institutions", help="List institutions")

    p_events = sub.add_parser("events", help="List events visible to you")
    p_events.add_argument("--filter", type=str, default=None, help="Backend filter value")
    p_events.add_argument("--past", action="store_true", help="Show past events instead of upcoming")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


_COMMANDS = {
    "login": _cmd_login,
    "signup": _cmd_signup,
    "logout": _cmd_logout,
    "whoami": _cmd_whoami,
    "institutions": _cmd_institutions,
    "events": _cmd_events,
    "interactive": _cmd_interactive,
}


def main(argv: Optional[list[str]] = None, app: Optional[App] = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {escape(str(exc))}", highlight=False)
        raise SystemExit(2)
    _setup_logging(settings.log_level, args.verbose)
    if app is None:
        app = build_app(settings)

    handler = _COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)
    try:
        code = handler(args, app)
    except EventDeskError as exc:
        console.print(f"[bold red]Error:[/] {escape(str(exc))}", highlight=False)
        code = 1
    raise SystemExit(code)
