from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from eventdesk.analytics import summarize
from eventdesk.app import App
from eventdesk.errors import AuthorizationError, EventDeskError, ValidationError
from eventdesk.model import Audience, Event, EventDraft, Registration, Role, User
from eventdesk.visibility import events_for_viewer, partition_by_time

console = Console()

DEPARTMENTS = [
    "Information System",
    "Information Technology",
    "Software Engineering",
    "Cybersecurity",
    "Computer Science",
]
CLASSES = ["100lvl", "200lvl", "300lvl", "400lvl"]


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str, password: bool = False) -> str:
    return console.input(escape(msg), password=password)


def _error(exc: Exception) -> None:
    _println(f"[bold red]Error:[/] {escape(str(exc))}")


def _signed_in(app: App) -> User:
    user = app.session.identity
    if user is None:
        raise AuthorizationError("You are not logged in.")
    return user


def _confirm(msg: str) -> bool:
    return _prompt(f"{msg} [y/N]: ").strip().lower() == "y"


def _when(ev: Event) -> str:
    local = ev.date.astimezone()
    return local.strftime("%Y-%m-%d %H:%M")


def _pick(items: list, label: Callable[[object], str], title: str) -> Optional[object]:
    """
    Show a numbered list and return the chosen item (None = cancelled).
    """
    if not items:
        _println("Nothing to choose from.")
        return None

    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Item")
    for i, item in enumerate(items, start=1):
        table.add_row(str(i), label(item))
    console.print(table)

    while True:
        pick = _prompt("Enter number [blank = cancel]: ").strip()
        if not pick:
            return None
        if not pick.isdigit():
            _println("Not a number.")
            continue
        idx = int(pick)
        if not (1 <= idx <= len(items)):
            _println("Out of range.")
            continue
        return items[idx - 1]


def _events_table(events: list[Event], title: str, with_count: bool = False, with_flag: bool = False) -> None:
    if not events:
        _println(f"No events to show ({title.lower()}).")
        return
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("When")
    table.add_column("Title", style="bold cyan")
    table.add_column("Location")
    table.add_column("Audience", style="green")
    table.add_column("Host", style="magenta")
    if with_count:
        table.add_column("Registered", justify="right", style="yellow")
    if with_flag:
        table.add_column("You")
    for ev in sorted(events, key=lambda e: e.date):
        row = [_when(ev), ev.title, ev.location, ev.audience.label, ev.creator_name]
        if with_count:
            row.append(str(ev.registration_count))
        if with_flag:
            row.append("registered" if ev.is_registered else "")
        table.add_row(*row)
    console.print(table)


def _read_datetime() -> datetime:
    date_s = _prompt("Date (YYYY-MM-DD): ").strip()
    time_s = _prompt("Time (HH:MM): ").strip()
    try:
        naive = datetime.strptime(f"{date_s} {time_s}", "%Y-%m-%d %H:%M")
    except ValueError:
        raise ValidationError("Invalid date or time.") from None
    return naive.astimezone()


def _read_audience() -> Audience:
    kind = _prompt("Audience [g]eneral / [d]epartment / [c]lass (default g): ").strip().lower()
    if kind.startswith("d"):
        return Audience.department(_choose_from("Department", DEPARTMENTS))
    if kind.startswith("c"):
        return Audience.for_class(_choose_from("Class", CLASSES))
    return Audience.general()


def _choose_from(what: str, options: list[str]) -> str:
    for i, opt in enumerate(options, start=1):
        _println(f"{i}) {opt}")
    raw = _prompt(f"{what} (number or name): ").strip()
    if raw.isdigit() and 1 <= int(raw) <= len(options):
        return options[int(raw) - 1]
    return raw


def _flow_create_event(app: App) -> None:
    _println("\n=== Create new event ===")
    title = _prompt("Title: ").strip()
    description = _prompt("Description: ").strip()
    location = _prompt("Location: ").strip()
    when = _read_datetime()
    audience = _read_audience()
    app.store.create_event(
        EventDraft(title=title, description=description, date=when, location=location, audience=audience)
    )
    _println(f"Created: {title}")


def _flow_delete_event(app: App, events: list[Event]) -> None:
    ev = _pick(events, lambda e: f"{_when(e)} | {e.title}", "Delete event")
    if ev is None:
        return
    if not _confirm(f"Delete '{ev.title}'? This action cannot be undone."):
        return
    app.store.delete_event(ev.id)
    _println(f"Deleted: {ev.title}")


def _flow_profile(app: App) -> None:
    me = _signed_in(app)
    _println(f"\nEmail: {me.email} | Role: {me.role.value} | Institution: {me.institution}")
    username = _prompt(f"Username [{me.username or ''}]: ").strip()
    new_password = _prompt("New password [blank = keep]: ", password=True)
    current = confirm = None
    if new_password:
        confirm = _prompt("Confirm new password: ", password=True)
        current = _prompt("Current password: ", password=True)
    app.session.update_profile(
        username=username or None,
        current_password=current,
        new_password=new_password or None,
        confirm_password=confirm,
    )
    _println("Profile updated successfully!")


# ---------------------------------------------------------------------------
# Role views
# ---------------------------------------------------------------------------


class _View:
    title = ""
    # (key, label, method name)
    menu: list[tuple[str, str, str]] = []

    def __init__(self, app: App) -> None:
        self.app = app

    @property
    def me(self) -> User:
        return _signed_in(self.app)

    def visible(self) -> list[Event]:
        return events_for_viewer(self.app.store.events, self.me)

    def header(self) -> None:
        _println(f"\n=== EventDesk: {self.title} ===")
        _println(f"Signed in as {self.me.display_name} ({self.me.institution})")

    def run(self) -> bool:
        """
        Menu loop. Returns False when the user wants to exit the program,
        True after a logout.
        """
        while True:
            self.header()
            lines = [f"[{key}] {label}" for key, label, _ in self.menu]
            lines += ["[p] Profile", "[r] Reload", "[l] Log out", "[0] Exit"]
            choice = _prompt("\n" + "\n".join(lines) + "\nSelect: ").strip().lower()

            if choice == "0":
                return False
            if choice == "l":
                self.app.session.logout()
                _println("Logged out.")
                return True

            try:
                if choice == "p":
                    _flow_profile(self.app)
                elif choice == "r":
                    self.app.store.refresh_all()
                else:
                    action = {key: name for key, _, name in self.menu}.get(choice)
                    if action is None:
                        _println("Invalid choice.")
                    else:
                        getattr(self, action)()
            except EventDeskError as exc:
                _error(exc)


class AdminView(_View):
    title = "Administrator"
    menu = [
        ("1", "Events", "show_events"),
        ("2", "Create event", "create_event"),
        ("3", "Delete event", "delete_event"),
        ("4", "Users", "show_users"),
        ("5", "Onboard user", "create_user"),
        ("6", "Delete user", "delete_user"),
        ("7", "Analytics", "analytics"),
    ]

    def show_events(self) -> None:
        _events_table(self.visible(), "All events", with_count=True)

    def create_event(self) -> None:
        _flow_create_event(self.app)

    def delete_event(self) -> None:
        _flow_delete_event(self.app, self.visible())

    def show_users(self) -> None:
        users = self.app.store.users
        if not users:
            _println("No users.")
            return
        table = Table(title="Users", box=box.SIMPLE)
        table.add_column("Email", style="bold cyan")
        table.add_column("Username")
        table.add_column("Role", style="green")
        table.add_column("Department")
        table.add_column("Class")
        for u in users:
            table.add_row(u.email, u.username or "", u.role.value, u.department or "", u.class_level or "")
        console.print(table)

    def create_user(self) -> None:
        _println("\n=== Onboard new user ===")
        email = _prompt("Email: ").strip()
        raw_role = _prompt("Role [s]tudent / [l]ecturer (default s): ").strip().lower()
        role = Role.LECTURER if raw_role.startswith("l") else Role.STUDENT
        department = class_level = None
        if role == Role.STUDENT:
            department = _choose_from("Department", DEPARTMENTS)
            class_level = _choose_from("Class", CLASSES)
        self.app.store.create_user(email, role, department, class_level)
        _println(f"Onboarded: {email}")
        _println("Note: a username and temporary password were generated; share them securely.")

    def delete_user(self) -> None:
        user = _pick(self.app.store.users, lambda u: f"{u.email} | {u.role.value}", "Delete user")
        if user is None:
            return
        if not _confirm(f"Delete {user.email}?"):
            return
        self.app.store.delete_user(user.id)
        _println(f"Deleted: {user.email}")

    def analytics(self) -> None:
        s = summarize(self.app.store.events, self.app.store.users)
        _println(f"\nTotal events: [yellow]{s.total_events}[/]")
        _println(f"Total users: [yellow]{s.total_users}[/]")
        _println(f"Total registrations: [yellow]{s.total_registrations}[/]")
        _println(" | ".join(f"{role}: {n}" for role, n in s.users_by_role.items()))
        if not s.chart:
            return
        table = Table(title="Registrations (first events)", box=box.SIMPLE)
        table.add_column("Event")
        table.add_column("Registrations", justify="right")
        table.add_column("")
        for label, n in s.chart:
            table.add_row(label, str(n), "█" * min(n, 40))
        console.print(table)


class LecturerView(_View):
    title = "Lecturer"
    menu = [
        ("1", "My events", "show_events"),
        ("2", "Create event", "create_event"),
        ("3", "Delete event", "delete_event"),
        ("4", "View registrations", "show_registrations"),
    ]

    def show_events(self) -> None:
        _events_table(self.visible(), "My events", with_count=True)

    def create_event(self) -> None:
        _flow_create_event(self.app)

    def delete_event(self) -> None:
        _flow_delete_event(self.app, self.visible())

    def show_registrations(self) -> None:
        ev = _pick(self.visible(), lambda e: f"{_when(e)} | {e.title}", "View registrations")
        if ev is None:
            return
        regs: list[Registration] = self.app.store.registrations(ev.id)
        if not regs:
            _println("No students have registered yet.")
            return
        noun = "student has" if len(regs) == 1 else "students have"
        _println(f"{len(regs)} {noun} registered for {ev.title}")
        table = Table(box=box.SIMPLE)
        table.add_column("Student", style="bold cyan")
        table.add_column("Email")
        table.add_column("Registered")
        for r in regs:
            table.add_row(r.student_name, r.student_email, r.registered_at.astimezone().strftime("%Y-%m-%d %H:%M"))
        console.print(table)


class StudentView(_View):
    title = "Student"
    menu = [
        ("1", "Upcoming events", "show_upcoming"),
        ("2", "Past events", "show_past"),
        ("3", "Register for an event", "register"),
        ("4", "Leave feedback", "feedback"),
    ]

    def header(self) -> None:
        super().header()
        bits = [f"{self.me.department} Department" if self.me.department else "", self.me.class_level or ""]
        line = " • ".join(b for b in bits if b)
        if line:
            _println(line)

    def show_upcoming(self) -> None:
        upcoming, _ = partition_by_time(self.visible())
        _events_table(upcoming, f"Upcoming events ({len(upcoming)})", with_flag=True)

    def show_past(self) -> None:
        _, past = partition_by_time(self.visible())
        _events_table(past, f"Past events ({len(past)})")

    def register(self) -> None:
        upcoming, _ = partition_by_time(self.visible())
        open_events = [e for e in upcoming if not e.is_registered]
        ev = _pick(open_events, lambda e: f"{_when(e)} | {e.title}", "Register")
        if ev is None:
            return
        self.app.store.register(ev.id)
        _println("Successfully registered for the event! Check your email for confirmation.")

    def feedback(self) -> None:
        _, past = partition_by_time(self.visible())
        ev = _pick(past, lambda e: f"{_when(e)} | {e.title}", "Feedback")
        if ev is None:
            return
        raw = _prompt("Rating (1-5): ").strip()
        rating = int(raw) if raw.isdigit() else 0
        comment = _prompt("Your feedback: ")
        self.app.store.submit_feedback(ev.id, rating, comment)
        _println("Thank you for your feedback!")


VIEWS: dict[Role, type[_View]] = {
    Role.ADMIN: AdminView,
    Role.LECTURER: LecturerView,
    Role.STUDENT: StudentView,
}


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------


def _flow_login(app: App, signup: bool = False) -> None:
    email = _prompt("Email: ").strip()
    password = _prompt("Password: ", password=True)
    if signup:
        institution = _prompt("Institution name: ").strip()
        app.session.signup(email, password, institution)
        return

    institutions = app.api.list_institutions()
    if institutions:
        names = [i.name for i in institutions]
        institution = ""
        while not institution:
            institution = _choose_from("Institution", names)
    else:
        institution = _prompt("Institution name: ").strip()
    app.session.login(email, password, institution)


def run_interactive(app: App) -> None:
    """
    Top-level loop: log in, run the view for the user's role, repeat after logout.
    """
    if app.session.loading:
        app.session.restore()

    while True:
        if not app.session.is_authenticated:
            choice = _prompt(
                "\n=== EventDesk ===\n[1] Log in\n[2] Admin sign up\n[0] Exit\nSelect: "
            ).strip()
            if choice == "0":
                _println("Bye.")
                return
            if choice not in ("1", "2"):
                _println("Invalid choice.")
                continue
            try:
                _flow_login(app, signup=choice == "2")
            except EventDeskError as exc:
                _error(exc)
                continue

        me = _signed_in(app)
        try:
            app.store.refresh_all()
        except EventDeskError as exc:
            _error(exc)

        # role resolved once; the view never re-checks it
        keep_going = VIEWS[me.role](app).run()
        if not keep_going:
            _println("Bye.")
            return
