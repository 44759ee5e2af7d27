"""
Smoke tests for the interactive menu loop.

User input is scripted by patching the prompt helper; output goes to a
throwaway console.
"""

import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

import eventdesk.interactive as interactive
from eventdesk.app import build_app
from eventdesk.config import Settings
from eventdesk.errors import AuthorizationError
from eventdesk.model import Role

from fakes import FakeApi, make_event, make_user


class TestInteractive(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        settings = Settings(session_file=Path(self._tmp.name) / "session.json")
        self.api = FakeApi()
        self.app = build_app(settings, api=self.api)

        self.out = io.StringIO()
        patcher = mock.patch.object(interactive, "console", Console(file=self.out, width=200))
        patcher.start()
        self.addCleanup(patcher.stop)

    def script(self, *answers: str) -> None:
        patcher = mock.patch.object(interactive, "_prompt", side_effect=list(answers))
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_views_cover_every_role(self) -> None:
        self.assertEqual(set(interactive.VIEWS), set(Role))

    def test_exit_when_anonymous(self) -> None:
        self.script("0")
        interactive.run_interactive(self.app)
        self.assertIn("Bye.", self.out.getvalue())
        self.assertEqual(self.api.calls, [])

    def test_login_and_show_upcoming_as_student(self) -> None:
        me = make_user("s1", Role.STUDENT, email="s@uni.edu")
        self.api.accounts[("s@uni.edu", "pw", "Uni")] = ("tok", me)
        self.api.events = [make_event("1", days=3650, title="Graduation")]

        self.script("1", "s@uni.edu", "pw", "1", "1", "0")
        interactive.run_interactive(self.app)

        self.assertIn("Graduation", self.out.getvalue())
        self.assertEqual(self.api.names(), ["list_institutions", "login", "list_events"])

    def test_failed_login_is_reported_and_loop_continues(self) -> None:
        self.script("1", "s@uni.edu", "bad", "1", "0")
        interactive.run_interactive(self.app)

        text = self.out.getvalue()
        self.assertIn("Invalid credentials", text)
        self.assertIn("Bye.", text)

    def test_blank_institution_choice_asks_again(self) -> None:
        me = make_user("s1", Role.STUDENT, email="s@uni.edu")
        self.api.accounts[("s@uni.edu", "pw", "Uni")] = ("tok", me)

        self.script("1", "s@uni.edu", "pw", "", "1", "0")
        interactive.run_interactive(self.app)

        self.assertIn(("login", "s@uni.edu", "Uni"), self.api.calls)
        self.assertEqual(self.api.names().count("login"), 1)

    def test_signed_in_helpers_refuse_anonymous_session(self) -> None:
        self.app.session.restore()
        with self.assertRaises(AuthorizationError):
            interactive._flow_profile(self.app)
        with self.assertRaises(AuthorizationError):
            interactive.StudentView(self.app).me

    def test_admin_cannot_delete_self_from_menu(self) -> None:
        me = make_user("a1", Role.ADMIN, email="a@uni.edu")
        self.api.profile = me
        self.api.users = [me]
        self.app.tokens.save("tok")

        # delete user -> pick #1 (self) -> confirm -> exit
        self.script("6", "1", "y", "0")
        interactive.run_interactive(self.app)

        self.assertIn("You cannot delete your own account.", self.out.getvalue())
        self.assertNotIn("delete_user", self.api.names())

    def test_logout_returns_to_login_menu(self) -> None:
        self.api.profile = make_user("l1", Role.LECTURER)
        self.app.tokens.save("tok")

        self.script("l", "0")
        interactive.run_interactive(self.app)

        self.assertIsNone(self.app.tokens.load())
        self.assertEqual(self.app.store.events, [])


if __name__ == "__main__":
    unittest.main()
