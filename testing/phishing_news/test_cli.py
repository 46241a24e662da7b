"""Tests for the phishing news command-line entry point."""

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from src.phishing_news.cli import TODAY_PENDING_HINT, main, parse_args, render_state, run
from src.phishing_news.state import DigestViewState, LoadOutcome, LoadPhase
from testing.phishing_news.fixtures import make_digest


class TestParseArgs(unittest.TestCase):
    """Tests for parse_args."""

    def test_defaults(self) -> None:
        """Test that today is the default selection."""
        args = parse_args([])

        self.assertFalse(args.latest)
        self.assertIsNone(args.date)
        self.assertEqual(args.source, "All")

    def test_latest_and_date_are_exclusive(self) -> None:
        """Test that only one selection can be given."""
        with self.assertRaises(SystemExit):
            parse_args(["--latest", "--date", "2025-01-21"])


class TestRenderState(unittest.TestCase):
    """Tests for render_state."""

    def test_renders_digest(self) -> None:
        """Test the text layout of a digest."""
        state = DigestViewState(phase=LoadPhase.SUCCESS, digest=make_digest("2025-01-21"))

        text = render_state(state)

        self.assertTrue(text.startswith("# Phishing news digest: 2025-01-21"))
        self.assertIn("Phishing news for 2025-01-21.", text)
        self.assertIn("https://example.com/2025-01-21/1", text)
        self.assertIn("Sources: KrebsOnSecurity, BleepingComputer", text)

    def test_lists_source_filter_options(self) -> None:
        """Test that the --source choices for the digest are shown."""
        state = DigestViewState(phase=LoadPhase.SUCCESS, digest=make_digest("2025-01-21"))

        text = render_state(state, source="BleepingComputer")

        self.assertIn("Filter with --source: All, BleepingComputer, KrebsOnSecurity", text)

    def test_stale_marker(self) -> None:
        """Test that stale digests are labelled."""
        state = DigestViewState(
            phase=LoadPhase.STALE_SUCCESS, digest=make_digest("2025-01-21"), is_stale=True
        )

        self.assertIn("(cached, could not refresh)", render_state(state))

    def test_today_pending_hint(self) -> None:
        """Test the hint shown when today's digest is not out yet."""
        state = DigestViewState(phase=LoadPhase.TODAY_PENDING, today_pending=True)

        self.assertEqual(render_state(state), TODAY_PENDING_HINT)

    def test_failed(self) -> None:
        """Test the error output."""
        state = DigestViewState(phase=LoadPhase.FAILED, error_message="Too many requests.")

        self.assertEqual(render_state(state), "Error: Too many requests.")

    def test_source_filter_applied(self) -> None:
        """Test that only the chosen source's articles are listed."""
        state = DigestViewState(phase=LoadPhase.SUCCESS, digest=make_digest("2025-01-21"))

        text = render_state(state, source="BleepingComputer")

        self.assertNotIn("https://example.com/2025-01-21/1", text)
        self.assertIn("https://example.com/2025-01-21/2", text)


class TestRun(unittest.IsolatedAsyncioTestCase):
    """Tests for run."""

    def setUp(self) -> None:
        """Set up test fixtures."""
        self.orchestrator = MagicMock()
        self.orchestrator.aclose = AsyncMock()
        self.orchestrator.state = DigestViewState(
            phase=LoadPhase.SUCCESS, digest=make_digest("2025-01-21")
        )
        success = LoadOutcome(digest=self.orchestrator.state.digest)
        self.orchestrator.select_today = AsyncMock(return_value=success)
        self.orchestrator.select_latest = AsyncMock(return_value=success)
        self.orchestrator.select_date = AsyncMock(return_value=success)
        self.orchestrator.load_available_dates = AsyncMock(return_value=("2025-01-21",))

    @patch("builtins.print")
    async def test_today_by_default(self, mock_print: MagicMock) -> None:
        """Test the default selection and exit code."""
        exit_code = await run(parse_args([]), self.orchestrator)

        self.assertEqual(exit_code, 0)
        self.orchestrator.select_today.assert_awaited_once()
        self.orchestrator.aclose.assert_awaited_once()
        mock_print.assert_called_once()

    @patch("builtins.print")
    async def test_date_and_list(self, mock_print: MagicMock) -> None:
        """Test a specific day with the available dates listed."""
        await run(parse_args(["--date", "2025-01-21", "--list"]), self.orchestrator)

        self.orchestrator.select_date.assert_awaited_once_with("2025-01-21")
        self.assertEqual(
            mock_print.call_args_list[0].args[0], "Available digests: 2025-01-21"
        )

    @patch("builtins.print")
    async def test_failure_exit_code(self, mock_print: MagicMock) -> None:
        """Test that a surfaced error exits non-zero."""
        self.orchestrator.select_latest = AsyncMock(
            return_value=LoadOutcome(digest=None, error_message="Server error (HTTP 500)")
        )

        exit_code = await run(parse_args(["--latest"]), self.orchestrator)

        self.assertEqual(exit_code, 1)


class TestMain(unittest.TestCase):
    """Tests for main."""

    @patch("src.phishing_news.cli.configure_logging")
    @patch("src.phishing_news.cli.load_dotenv")
    @patch("src.phishing_news.cli.run", new_callable=AsyncMock)
    def test_main_exits_with_run_code(
        self,
        mock_run: AsyncMock,
        mock_load_dotenv: MagicMock,
        mock_configure_logging: MagicMock,
    ) -> None:
        """Test that main configures logging and exits with run's code."""
        mock_run.return_value = 1

        with self.assertRaises(SystemExit) as ctx:
            main(["--verbose"])

        self.assertEqual(ctx.exception.code, 1)
        mock_load_dotenv.assert_called_once()
        mock_configure_logging.assert_called_once_with("DEBUG")

    @patch("src.phishing_news.cli.configure_logging")
    @patch("src.phishing_news.cli.load_dotenv")
    @patch("src.phishing_news.cli.run", new_callable=AsyncMock)
    def test_invalid_date_exits_with_usage_code(
        self,
        mock_run: AsyncMock,
        mock_load_dotenv: MagicMock,
        mock_configure_logging: MagicMock,
    ) -> None:
        """Test that invalid input is reported instead of raising."""
        mock_run.side_effect = ValueError("Invalid digest date")

        with self.assertRaises(SystemExit) as ctx:
            main(["--date", "yesterday"])

        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
