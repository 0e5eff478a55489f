"""Command-line interface for send2teams."""

import logging
import sys
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from send2teams.branding import branding
from send2teams.compose import build_message, submit
from send2teams.config import (
    DEFAULT_CHANNEL_NAME,
    DEFAULT_RETRIES,
    DEFAULT_RETRIES_DELAY,
    DEFAULT_TEAM_NAME,
    DEFAULT_THEME_COLOR,
    WEBHOOK_URL_ENV_VAR,
    CardFormat,
    Config,
    TargetURL,
    UserMention,
)
from send2teams.errors import ConfigError, Send2TeamsError

app = typer.Typer(
    name="send2teams",
    help="Send a message to a Microsoft Teams channel via an incoming webhook",
    add_completion=False,
)

console = Console()

LOG_FORMAT = "[send2teams] %(asctime)s %(name)s %(levelname)s: %(message)s"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(branding())
        raise typer.Exit()


def _configure_logging(verbose: bool, silent: bool) -> None:
    package_logger = logging.getLogger("send2teams")
    package_logger.handlers = [h for h in package_logger.handlers if isinstance(h, logging.NullHandler)]
    if silent:
        package_logger.propagate = False
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _print_config(config: Config) -> None:
    table = Table(title="Configuration", show_header=True, header_style="bold magenta")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in config.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def send(
    webhook_url: Annotated[
        str,
        typer.Option(
            "--url",
            "-u",
            envvar=WEBHOOK_URL_ENV_VAR,
            help="The Webhook URL provided by a preconfigured Connector.",
        ),
    ] = "",
    title: Annotated[
        str,
        typer.Option("--title", "-t", help="The title for the message to submit."),
    ] = "",
    message: Annotated[
        str,
        typer.Option(
            "--message",
            "-m",
            help="The message to submit. This message may be provided in Markdown format.",
        ),
    ] = "",
    color: Annotated[
        str,
        typer.Option("--color", "-c", help="Hex color code for the message trim (MessageCard)."),
    ] = DEFAULT_THEME_COLOR,
    team: Annotated[
        str,
        typer.Option("--team", help="Team containing the target channel. Used in log messages."),
    ] = DEFAULT_TEAM_NAME,
    channel: Annotated[
        str,
        typer.Option("--channel", help="Target channel. Used in log messages."),
    ] = DEFAULT_CHANNEL_NAME,
    sender: Annotated[
        str,
        typer.Option("--sender", help="Application on whose behalf the message is sent."),
    ] = "",
    target_url: Annotated[
        Optional[list[str]],
        typer.Option(
            "--target-url",
            help="Target URL and label as a comma separated pair, shown as a button. Repeatable.",
        ),
    ] = None,
    user_mention: Annotated[
        Optional[list[str]],
        typer.Option(
            "--user-mention",
            help="Display name and user id as a comma separated pair. Repeatable.",
        ),
    ] = None,
    retries: Annotated[
        int,
        typer.Option("--retries", help="Delivery attempts to make after the first one fails."),
    ] = DEFAULT_RETRIES,
    retries_delay: Annotated[
        int,
        typer.Option("--retries-delay", help="Seconds to wait between delivery attempts."),
    ] = DEFAULT_RETRIES_DELAY,
    card_format: Annotated[
        CardFormat,
        typer.Option("--format", "-f", case_sensitive=False, help="Card format to submit."),
    ] = CardFormat.ADAPTIVECARD,
    no_branding: Annotated[
        bool,
        typer.Option("--no-branding", help="Omit the 'Message delivered by' trailer."),
    ] = False,
    disable_webhook_url_validation: Annotated[
        bool,
        typer.Option(
            "--disable-webhook-url-validation",
            help="Accept webhook URLs that do not match the expected pattern.",
        ),
    ] = False,
    silent: Annotated[
        bool,
        typer.Option("--silent", help="Show no output after submission success or failure."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show detailed output after submission success or failure."),
    ] = False,
    convert_eol: Annotated[
        bool,
        typer.Option("--convert-eol", help="Convert Windows, Mac and Linux newlines to break statements."),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Display application version and exit.",
        ),
    ] = None,
) -> None:
    """Send a message to a Microsoft Teams channel."""
    try:
        config = Config(
            webhook_url=webhook_url,
            title=title,
            message=message,
            theme_color=color,
            team=team,
            channel=channel,
            sender=sender,
            target_urls=[TargetURL.parse(v) for v in target_url or []],
            user_mentions=[UserMention.parse(v) for v in user_mention or []],
            retries=retries,
            retries_delay=retries_delay,
            card_format=card_format,
            disable_branding=no_branding,
            disable_webhook_url_validation=disable_webhook_url_validation,
            silent=silent,
            verbose=verbose,
            convert_eol=convert_eol,
        )
        config.validate()
    except ConfigError as e:
        typer.echo(f"Error: failed to initialize application: {e}", err=True)
        raise typer.Exit(1)

    _configure_logging(config.verbose, config.silent)

    if config.verbose:
        _print_config(config)

    try:
        msg = build_message(config)
        submit(config, message=msg)
    except Send2TeamsError as e:
        if not config.silent:
            typer.echo(
                f"ERROR: Failed to submit message to {config.channel!r} channel "
                f"in the {config.team!r} team: {e}",
                err=True,
            )
            cause = e.__cause__
            while cause is not None:
                typer.echo(f"  caused by: {cause}", err=True)
                cause = cause.__cause__
        raise typer.Exit(1)

    if not config.silent:
        typer.echo("Message successfully sent!")

    if config.verbose:
        console.print_json(msg.pretty_print())


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
