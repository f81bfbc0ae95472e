# src/waypoint/cli.py
"""Waypoint Command Line Interface.

Entry point for the waypoint CLI tool.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import httpx
import typer
import yaml
from pydantic import ValidationError

from waypoint import __version__
from waypoint.contracts import Request, RequestOptions, Response, WaypointError
from waypoint.core.config import WaypointSettings, load_settings
from waypoint.pipeline import HttpxTransport, MiddlewarePipeline, Pipeline
from waypoint.redirect import RedirectHandler, RedirectPolicy, is_redirect

__all__ = [
    "app",
    "load_settings",  # Re-exported from config for convenience
]

app = typer.Typer(
    name="waypoint",
    help="Waypoint: follow HTTP redirects through a middleware pipeline.",
    no_args_is_help=True,
)


@dataclass(frozen=True)
class HopRecord:
    """One request/response exchange observed below the redirect handler."""

    method: str
    url: str
    status_code: int


class HopRecorder:
    """Middleware that records every request it forwards.

    Placed after RedirectHandler, it sees the original request and each
    rebuilt hop.
    """

    def __init__(self) -> None:
        self.hops: list[HopRecord] = []

    def intercept(self, pipeline: Pipeline, request: Request, options: RequestOptions) -> Response:
        response = pipeline.next(request)
        self.hops.append(HopRecord(method=request.method, url=str(request.url), status_code=response.status_code))
        return response


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"waypoint version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # We handle existence check ourselves for better error message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """Waypoint: follow HTTP redirects through a middleware pipeline."""
    from waypoint.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "WARNING"
    configure_logging(json_output=json_logs, level=log_level)
    ctx.obj = {"verbose": verbose, "json_logs": json_logs}

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _parse_headers(raw_headers: list[str]) -> list[tuple[str, str]]:
    """Parse repeated 'Name: value' options."""
    headers: list[tuple[str, str]] = []
    for raw in raw_headers:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Header must be 'Name: value', got {raw!r}", param_hint="--header")
        headers.append((name.strip(), value.strip()))
    return headers


def _load_trace_settings(settings: str | None) -> WaypointSettings:
    try:
        if settings is None:
            return WaypointSettings()
        return load_settings(Path(settings).expanduser())
    except yaml.YAMLError as e:
        typer.echo(f"YAML syntax error in {settings}: {e}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None
    except ValueError as e:
        # Checked after ValidationError, which subclasses ValueError
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _render_console(hops: list[HopRecord], response: Response) -> None:
    for number, hop in enumerate(hops, start=1):
        typer.echo(f"{number:>3}. {hop.method} {hop.url} -> {hop.status_code}")

    redirects_followed = max(len(hops) - 1, 0)
    if is_redirect(response):
        typer.secho(
            f"Stopped at unresolved redirect {response.status_code} -> {response.location} ({redirects_followed} followed)",
            fg=typer.colors.YELLOW,
        )
    else:
        typer.echo(f"Final status: {response.status_code} ({redirects_followed} redirects followed)")


def _render_json(hops: list[HopRecord], response: Response) -> None:
    payload: dict[str, Any] = {
        "hops": [{"method": hop.method, "url": hop.url, "status_code": hop.status_code} for hop in hops],
        "final_status": response.status_code,
        "redirects_followed": max(len(hops) - 1, 0),
        "unresolved_redirect": is_redirect(response),
    }
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def trace(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL to request."),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    max_redirects: int | None = typer.Option(
        None,
        "--max-redirects",
        "-m",
        help="Override the configured hop limit for this call (clamped to 1..20).",
    ),
    method: str = typer.Option(
        "GET",
        "--method",
        "-X",
        help="HTTP method for the first request.",
    ),
    header: list[str] = typer.Option(
        [],
        "--header",
        "-H",
        help="Extra request header as 'Name: value' (repeatable).",
    ),
    data: str | None = typer.Option(
        None,
        "--data",
        "-d",
        help="Request body.",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Send a request and show every redirect hop that was followed."""
    from waypoint.core.logging import configure_logging

    config = _load_trace_settings(settings)
    # WAYPOINT_LOGGING__* variables apply even without --settings
    flags = ctx.obj or {}
    configure_logging(
        json_output=flags.get("json_logs", False) or config.logging.json_output,
        level="DEBUG" if flags.get("verbose", False) else config.logging.level,
    )

    headers = _parse_headers(header)
    try:
        request = Request.build(method, url, headers=headers, body=data)
    except httpx.InvalidURL as e:
        typer.echo(f"Error: Invalid URL {url!r}: {e}", err=True)
        raise typer.Exit(1) from None

    default_policy = config.redirect.to_policy()
    options = RequestOptions()
    if max_redirects is not None:
        options = RequestOptions(
            redirect_policy=RedirectPolicy(
                should_redirect=default_policy.should_redirect,
                max_redirects=max_redirects,
            )
        )

    recorder = HopRecorder()
    transport = HttpxTransport(
        timeout=config.http.timeout_seconds,
        headers=config.http.default_headers(),
    )
    with MiddlewarePipeline(transport, [RedirectHandler(default_policy), recorder]) as pipeline:
        try:
            response = pipeline.send(request, options=options)
        except WaypointError as e:
            typer.echo(f"Error: {e}", err=True)
            if e.response is not None:
                typer.echo(f"Last response: {e.response.status_code}", err=True)
            raise typer.Exit(1) from None

    if output_format == "json":
        _render_json(recorder.hops, response)
    else:
        _render_console(recorder.hops, response)


if __name__ == "__main__":
    app()
