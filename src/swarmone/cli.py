"""
CLI entry point for the swarmone client.
"""

import asyncio
import functools
import logging
import signal
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .client import CancelToken, ConsensusClient, RequestCancelled, RequestError
from .config import (
    DEFAULT_CONFIG_PATH,
    ClientConfig,
    load_config,
    save_config,
)
from .display import render_preview, render_result
from .instruction import TaskForm, build_instruction


console = Console()

# Exit status after Ctrl-C, as a shell reports SIGINT
EXIT_CANCELLED = 130


def _task_options(func):
    """Attach the task builder options shared by `ask` and `preview`."""
    defaults = TaskForm()
    options = [
        click.option("--task", default=defaults.task, show_default=True, help="What the swarm should do."),
        click.option("--content", default=defaults.content, help="What the AI should work on."),
        click.option("--expectations", default=defaults.expectations, show_default=True, help="Tone, style, length."),
        click.option("--source", default=defaults.source, help="References, URLs or notes."),
        click.option("--language", default=defaults.language, show_default=True, help="e.g. en-US or zh-CN."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _form_from_options(task: str, content: str, expectations: str, source: str, language: str) -> TaskForm:
    return TaskForm(
        task=task,
        content=content,
        expectations=expectations,
        source=source,
        language=language,
    )


def _resolve_config(
    config_path: str | None,
    api_base: str | None = None,
    timeout: float | None = None,
) -> ClientConfig:
    """Load file and environment config, then apply CLI flags."""
    client_config = load_config(config_path)
    overrides = {}
    if api_base is not None:
        overrides["api_base"] = api_base
    if timeout is not None:
        overrides["timeout"] = timeout
    if overrides:
        client_config = replace(client_config, **overrides)
    return client_config


async def _run_cancellable(call):
    """
    Run `call(cancel_token)`, routing Ctrl-C to the token.

    Falls back to plain KeyboardInterrupt where the loop cannot install
    signal handlers.
    """
    cancel = CancelToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel.cancel)
        installed = True
    except (NotImplementedError, RuntimeError, ValueError):
        installed = False

    try:
        return await call(cancel)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def _fail(message: str, code: int = 1) -> None:
    console.print(f"[bold red]Error:[/] {escape(message)}")
    raise SystemExit(code)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log request details.")
def main(verbose: bool):
    """Swarmone - ask a swarm of models and read the judge's verdict.

    \b
    Configuration:
      Config file: .swarmone/config.json (created by 'swarmone init')
      SWARMONE_API_BASE selects the API base URL.
      CLI flags override config file and environment settings.

    \b
    Quick start:
      swarmone preview --content "..."   Show the instruction that would be sent
      swarmone ask --content "..."       Ask the swarm
      swarmone health                    Check the service
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@main.command()
@_task_options
@click.option(
    "--instruction", "-i",
    default=None,
    help="Send this text verbatim instead of building it from the task options.",
)
@click.option(
    "--template-id",
    default=None,
    help="Server-side prompt template. Default: template_id from config.",
)
@click.option(
    "--no-template",
    is_flag=True,
    help="Send no template id and let the server pick its default.",
)
@click.option(
    "--api-base",
    default=None,
    help="API base URL. Overrides config file and SWARMONE_API_BASE.",
)
@click.option(
    "--timeout", "-t",
    type=float,
    default=None,
    help="Request timeout in seconds.",
)
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(exists=True),
    help="Path to config file. Default: .swarmone/config.json",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the raw result as JSON.",
)
def ask(
    task: str,
    content: str,
    expectations: str,
    source: str,
    language: str,
    instruction: str | None,
    template_id: str | None,
    no_template: bool,
    api_base: str | None,
    timeout: float | None,
    config_path: str | None,
    as_json: bool,
):
    """Send an instruction to the swarm and show the judge's verdict.

    Per-runner scores are shown with four decimals. N/A marks a runner that
    gave no usable answer; 0.0000 marks a runner that answered but got no
    score from the judge.
    """
    try:
        client_config = _resolve_config(config_path, api_base, timeout)
    except ValueError as e:
        _fail(str(e))

    if no_template:
        template = None
    elif template_id is not None:
        template = template_id
    else:
        template = client_config.template_id

    if instruction is None:
        instruction = build_instruction(
            _form_from_options(task, content, expectations, source, language)
        )
    if not instruction.strip():
        _fail("Instruction must not be empty")

    client = ConsensusClient(client_config)
    try:
        with console.status("[bold blue]Asking the swarm..."):
            result = asyncio.run(
                _run_cancellable(functools.partial(client.submit, template, instruction))
            )
    except RequestCancelled:
        console.print("\n[yellow]Cancelled[/]")
        raise SystemExit(EXIT_CANCELLED)
    except RequestError as e:
        _fail(str(e))

    if as_json:
        console.print_json(data=result.to_dict())
    else:
        render_result(console, result)


@main.command()
@_task_options
def preview(task: str, content: str, expectations: str, source: str, language: str):
    """Show the instruction text and payload JSON without sending anything."""
    render_preview(console, _form_from_options(task, content, expectations, source, language))


@main.command()
@click.option("--api-base", default=None, help="API base URL.")
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(exists=True),
    help="Path to config file. Default: .swarmone/config.json",
)
def health(api_base: str | None, config_path: str | None):
    """Check that the consensus service is up."""
    try:
        client_config = _resolve_config(config_path, api_base)
    except ValueError as e:
        _fail(str(e))

    client = ConsensusClient(client_config)
    try:
        status = asyncio.run(_run_cancellable(client.health))
    except RequestCancelled:
        console.print("\n[yellow]Cancelled[/]")
        raise SystemExit(EXIT_CANCELLED)
    except RequestError as e:
        _fail(str(e))

    if not status.ok:
        console.print(f"[bold yellow]Service not ready[/] (runners: {status.runners})")
        raise SystemExit(1)
    console.print(f"[green]✓[/] Service ok (runners: {status.runners})")


@main.command()
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing configuration",
)
@click.option(
    "--api-base",
    default="",
    help="API base URL to store. Empty means relative paths behind a proxy.",
)
def init(force: bool, api_base: str):
    """Create .swarmone/config.json in the current directory."""
    if DEFAULT_CONFIG_PATH.exists() and not force:
        console.print("[yellow]⚠️  Configuration already exists[/]")
        console.print("   Use --force to overwrite existing configuration")
        return

    try:
        client_config = ClientConfig(api_base=api_base)
    except ValueError as e:
        _fail(str(e))

    save_config(client_config)
    console.print(f"   ✓ Created {DEFAULT_CONFIG_PATH}")
    console.print("\n[dim]Next steps:[/]")
    console.print("   Run [cyan]swarmone ask --content \"...\"[/] to ask the swarm")


@main.group()
def config():
    """View and modify swarmone configuration.

    \b
    Commands:
      show    Display current configuration
      set     Update a configuration value
    """
    pass


# Map CLI keys (with hyphens) to config keys (with underscores)
CONFIG_KEYS = {
    "api-base": "api_base",
    "origin": "origin",
    "ask-path": "ask_path",
    "health-path": "health_path",
    "timeout": "timeout",
    "template-id": "template_id",
}


def _require_config_file() -> None:
    if not Path(DEFAULT_CONFIG_PATH).exists():
        console.print("[bold red]Error:[/] swarmone not initialized.")
        console.print("Run [cyan]swarmone init[/] first.")
        raise SystemExit(1)


@config.command("show")
def config_show():
    """Display the stored configuration."""
    _require_config_file()
    try:
        config_dict = load_config(environ={}).to_dict()
    except ValueError as e:
        _fail(str(e))

    console.print(f"\n   [dim]Config file:[/] {DEFAULT_CONFIG_PATH}\n")
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="white")
    table.add_column("Current Value", style="green")
    for cli_key, config_key in CONFIG_KEYS.items():
        table.add_row(cli_key, str(config_dict[config_key]))
    console.print(table)


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value.

    \b
    KEY is one of: api-base, origin, ask-path, health-path, timeout, template-id

    \b
    Examples:
      swarmone config set api-base https://swarm.example.com
      swarmone config set timeout 60
    """
    _require_config_file()

    if key not in CONFIG_KEYS:
        console.print(f"[bold red]Error:[/] Unknown config key '{key}'")
        console.print(f"Valid keys: {', '.join(CONFIG_KEYS)}")
        raise SystemExit(1)
    config_key = CONFIG_KEYS[key]

    new_value: str | float = value
    if config_key == "timeout":
        try:
            new_value = float(value)
        except ValueError:
            _fail(f"{key} must be a number")

    try:
        # File values only, so environment overrides never get persisted
        client_config = replace(load_config(environ={}), **{config_key: new_value})
    except ValueError as e:
        _fail(str(e))

    save_config(client_config)
    console.print(f"[green]✓[/] Set {key} = {new_value}")
