"""Tests for the command-line interface."""
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from ticketmaster_resale_check import cli
from ticketmaster_resale_check.errors import ConfigurationError
from ticketmaster_resale_check.models import AppConfig

REQUIRED_ARGS = [
    "--event-id", "EVT",
    "--event-name", "Test Event",
    "--ntfy-url", "https://ntfy.example.com/test-topic",
    "--cookie", "eps_sid=abc",
]


@pytest.fixture
def empty_env():
    """Ignore the real environment and .env file."""
    with patch("ticketmaster_resale_check.cli.load_config", side_effect=lambda: AppConfig()):
        yield


@pytest.fixture
def mock_run_once():
    with patch("ticketmaster_resale_check.cli.run_once", new_callable=AsyncMock) as mock_run:
        yield mock_run


class TestParseArgs:
    """Tests for argument parsing."""

    def test_kebab_case_options(self):
        args = cli.parse_args(REQUIRED_ARGS)

        assert args.event_id == "EVT"
        assert args.event_name == "Test Event"
        assert args.ntfy_url == "https://ntfy.example.com/test-topic"
        assert args.cookie == "eps_sid=abc"

    def test_camel_case_aliases(self):
        args = cli.parse_args([
            "--eventId=EVT",
            "--eventName=Test Event",
            "--ntfyUrl=https://ntfy.example.com/test-topic",
        ])

        assert args.event_id == "EVT"
        assert args.event_name == "Test Event"
        assert args.ntfy_url == "https://ntfy.example.com/test-topic"

    def test_verbose_sets_debug(self):
        assert cli.parse_args(["-v"]).log_level == "DEBUG"

    def test_bare_key_value_tokens(self):
        """Test the original script's eventId=... style without dashes."""
        args = cli.parse_args([
            "eventId=EVT",
            "eventName=Test Event",
            "ntfyUrl=https://ntfy.example.com/test-topic",
        ])

        assert args.event_id == "EVT"
        assert args.event_name == "Test Event"
        assert args.ntfy_url == "https://ntfy.example.com/test-topic"

    def test_key_value_option_values_are_kept(self):
        """A value that looks like key=value stays the value of its option."""
        args = cli.parse_args(["--event-name", "eventId=x", "--cookie", "eps_sid=abc"])

        assert args.event_name == "eventId=x"
        assert args.event_id is None
        assert args.cookie == "eps_sid=abc"


class TestFinalizeConfig:
    """Tests for configuration validation."""

    def make_config(self, **overrides):
        values = dict(
            event_id="EVT",
            event_name="Test Event",
            ntfy_url="https://ntfy.example.com/test-topic/extra",
            cookie="eps_sid=abc",
        )
        values.update(overrides)
        return AppConfig(**values)

    def test_splits_ntfy_url(self):
        config = cli.finalize_config(self.make_config())

        assert config.notification.server == "https://ntfy.example.com"
        assert config.notification.topic == "test-topic"

    @pytest.mark.parametrize("field", ["event_id", "event_name", "ntfy_url"])
    def test_missing_required_value(self, field):
        with pytest.raises(ConfigurationError, match="Missing required parameters"):
            cli.finalize_config(self.make_config(**{field: None}))

    def test_ntfy_url_without_topic(self):
        with pytest.raises(ConfigurationError, match="topic"):
            cli.finalize_config(self.make_config(ntfy_url="https://ntfy.example.com/"))

    def test_ntfy_url_without_scheme(self):
        with pytest.raises(ConfigurationError):
            cli.finalize_config(self.make_config(ntfy_url="ntfy.example.com/topic"))

    def test_cookie_from_file(self, tmp_path):
        cookie_file = tmp_path / "cookie.txt"
        cookie_file.write_text("eps_sid=from-file\n", encoding="utf-8")

        config = cli.finalize_config(self.make_config(cookie=None, cookie_file=str(cookie_file)))

        assert config.cookie == "eps_sid=from-file"

    def test_empty_cookie_file(self, tmp_path):
        cookie_file = tmp_path / "cookie.txt"
        cookie_file.write_text("  \n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="empty"):
            cli.finalize_config(self.make_config(cookie=None, cookie_file=str(cookie_file)))

    def test_missing_cookie_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            cli.finalize_config(
                self.make_config(cookie=None, cookie_file=str(tmp_path / "missing.txt"))
            )

    def test_no_cookie(self):
        with pytest.raises(ConfigurationError, match="cookie"):
            cli.finalize_config(self.make_config(cookie=None))

    @pytest.mark.parametrize("field", ["event_url_template", "availability_url_template"])
    @pytest.mark.parametrize("template", ["https://x/{id}", "https://x/{0}", "https://x/{event_id"])
    def test_invalid_url_template(self, field, template):
        with pytest.raises(ConfigurationError, match="Invalid TM_"):
            cli.finalize_config(self.make_config(**{field: template}))

    def test_custom_url_templates(self):
        config = cli.finalize_config(self.make_config(
            event_url_template="https://www.ticketmaster.se/event/{event_id}",
            availability_url_template="https://availability.ticketmaster.se/api/v2/TM_SE/resale/{event_id}",
        ))

        assert config.event.url == "https://www.ticketmaster.se/event/EVT"


class TestCreateConfigFromArgs:
    """Tests for overlaying CLI values on the environment configuration."""

    def test_cli_overrides_environment(self):
        env_config = AppConfig(event_id="ENV", event_name="Env Event", cookie_file="env-cookie.txt")
        args = cli.parse_args(["--event-id", "CLI", "--cookie", "eps_sid=cli", "--timeout", "5"])

        config = cli.create_config_from_args(args, env_config)

        assert config.event_id == "CLI"
        assert config.event_name == "Env Event"
        assert config.cookie == "eps_sid=cli"
        assert config.cookie_file is None
        assert config.request_timeout == 5.0


class TestMain:
    """Tests for the CLI entry point."""

    def test_success_exit_code(self, empty_env, mock_run_once, tmp_path):
        exit_code = cli.main(REQUIRED_ARGS + ["--state-file", str(tmp_path / "state.json")])

        assert exit_code == 0
        mock_run_once.assert_awaited_once()
        config = mock_run_once.await_args.args[0]
        assert config.notification.topic == "test-topic"
        assert config.state_file == str(tmp_path / "state.json")

    @pytest.mark.parametrize("dropped", ["--event-id", "--event-name", "--ntfy-url"])
    def test_missing_option_exits_before_network(self, empty_env, mock_run_once, dropped):
        index = REQUIRED_ARGS.index(dropped)
        argv = REQUIRED_ARGS[:index] + REQUIRED_ARGS[index + 2:]

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            exit_code = cli.main(argv)

        assert exit_code == 1
        mock_run_once.assert_not_awaited()
        mock_get.assert_not_awaited()

    def test_empty_cookie_file_exits(self, empty_env, mock_run_once, tmp_path):
        cookie_file = tmp_path / "cookie.txt"
        cookie_file.write_text("", encoding="utf-8")
        argv = REQUIRED_ARGS[:-2] + ["--cookie-file", str(cookie_file)]

        assert cli.main(argv) == 1
        mock_run_once.assert_not_awaited()

    def test_invalid_availability_template_exits_before_network(self, mock_run_once):
        config = AppConfig(availability_url_template="https://availability.example.com/{id}")

        with patch("ticketmaster_resale_check.cli.load_config", return_value=config):
            with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get, \
                    patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
                exit_code = cli.main(REQUIRED_ARGS)

        assert exit_code == 1
        mock_run_once.assert_not_awaited()
        mock_get.assert_not_awaited()
        mock_post.assert_not_awaited()

    def test_availability_error_sends_error_notification(self, empty_env, tmp_path):
        """HTTP 500 from the availability API ends in an error notification and exit 0."""
        state_path = tmp_path / "state.json"
        state_path.write_text('["A"]', encoding="utf-8")
        failed = httpx.Response(500, request=httpx.Request("GET", "https://availability.example.com"))
        accepted = httpx.Response(200, request=httpx.Request("POST", "https://ntfy.example.com"))

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=failed) as mock_get, \
                patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=accepted) as mock_post:
            exit_code = cli.main(REQUIRED_ARGS + ["--state-file", str(state_path)])

        assert exit_code == 0
        mock_get.assert_awaited_once()
        assert mock_get.await_args.kwargs["headers"]["Cookie"] == "eps_sid=abc"
        mock_post.assert_awaited_once()
        args, kwargs = mock_post.await_args
        assert args[0] == "https://ntfy.example.com"
        assert kwargs["json"]["topic"] == "test-topic"
        assert kwargs["json"]["title"] == "Error checking tickets"
        assert 'for "Test Event"' in kwargs["json"]["message"]
        assert "HTTP error! status: 500" in kwargs["json"]["message"]
        assert "actions" not in kwargs["json"]
        assert state_path.read_text(encoding="utf-8") == '["A"]'
