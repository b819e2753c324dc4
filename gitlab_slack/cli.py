"""Click CLI for running and checking the GitLab to Slack relay."""

from __future__ import annotations

import json
import os

import click

from gitlab_slack.config import DEFAULT_CONFIG_PATH, ConfigError, load_config
from gitlab_slack.logging_setup import configure_logging
from gitlab_slack.markup.converter import convert_markdown_to_slack


@click.group()
@click.option("--log-level", default=lambda: os.environ.get("LOG_LEVEL", "INFO"), help="Logging level.")
def cli(log_level: str) -> None:
    """Relay GitLab webhook events to Slack."""
    configure_logging(log_level.upper())


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port to listen on (default: from config file).")
def serve(host: str, port: int | None) -> None:
    """Start the webhook listener."""
    import uvicorn

    config_path = os.environ.get("GITLAB_SLACK_CONFIG", DEFAULT_CONFIG_PATH)
    try:
        config = load_config(config_path)
    except (ConfigError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e

    uvicorn.run(
        "gitlab_slack.server.app:create_app_from_env",
        factory=True,
        host=host,
        port=port or config.port,
        log_config=None,
    )


@cli.command("check-config")
@click.argument("config_path", default=DEFAULT_CONFIG_PATH)
def check_config(config_path: str) -> None:
    """Validate a project configuration file and print the project map."""
    try:
        config = load_config(config_path)
    except (ConfigError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e

    output = {
        str(pid): {"name": p.name, "channel": p.channel, "patterns": p.patterns}
        for pid, p in config.project_map().items()
    }
    click.echo(json.dumps(output, indent=2))


@cli.command()
@click.argument("text")
@click.option("--base-url", default="", help="Base URL for relative image links.")
def convert(text: str, base_url: str) -> None:
    """Print the Slack rendering of a markdown string."""
    click.echo(convert_markdown_to_slack(text, base_url))
