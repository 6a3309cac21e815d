import asyncio
import logging
import sys
from typing import Optional

import click

from promptline.version import __version__
from promptline.logutil import setup_logging
from promptline.config import ConfigManager, resolve_client_config
from promptline.generate import SAMPLE_PROMPT, build_client, generate_response
from promptline.llm import DEFAULT_MODELS, ClientConfig


class FriendlyException(click.ClickException):
    pass


@click.group(context_settings={"help_option_names": ["-h", "--help"]}, invoke_without_command=True)
@click.option("--verbose", "verbose", is_flag=True, help="Enable verbose logging (DEBUG)")
@click.version_option(version=__version__, prog_name="promptline")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """promptline: send a prompt to a language model and print the completion."""
    setup_logging(debug=verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    # No subcommand: run the sample prompt with the configured defaults
    if ctx.invoked_subcommand is None:
        ctx.invoke(ask, prompt=None, provider=None, model=None, temperature=None, max_tokens=None)


# -----------------
# Ask
# -----------------


async def _run_once(config: ClientConfig, prompt: str) -> Optional[str]:
    async with build_client(config) as client:
        return await generate_response(client, prompt)


@cli.command()
@click.argument("prompt", required=False)
@click.option("--provider", type=click.Choice(sorted(DEFAULT_MODELS)), default=None, help="Completion backend")
@click.option("--model", default=None, help="Model identifier (default depends on provider)")
@click.option("--temperature", type=click.FloatRange(0.0, 2.0), default=None, help="Sampling temperature")
@click.option("--max-tokens", "max_tokens", type=click.IntRange(min=1), default=None, help="Maximum output tokens")
def ask(prompt: Optional[str], provider: Optional[str], model: Optional[str], temperature: Optional[float], max_tokens: Optional[int]):
    """Send PROMPT and print the first completion ('-' reads stdin)."""
    if prompt is None:
        prompt = SAMPLE_PROMPT
    elif prompt == "-":
        prompt = sys.stdin.read().strip()

    try:
        config = resolve_client_config(
            provider=provider,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except ValueError as e:
        raise FriendlyException(f"Invalid configuration: {e}")

    # Failures are reported on stderr by generate_response; exit status stays 0
    asyncio.run(_run_once(config, prompt))


# -----------------
# Config commands
# -----------------


@cli.group()
@click.pass_context
def config(ctx: click.Context):
    """Manage settings (API key, model, ...)."""
    pass


@config.command("set")
@click.option("--key", "key", required=True, help="Setting name (e.g. api-key)")
@click.option("--value", "value", required=True, help="Setting value")
def config_set(key: str, value: str):
    """Save a setting."""
    try:
        if not key or not key.strip():
            raise FriendlyException("Key is empty.")
        if value is None or not str(value).strip():
            raise FriendlyException("Value is empty.")
        cm = ConfigManager()
        cm.set(key, value)
        click.echo(f"Saved: {key}")
    except FriendlyException:
        raise
    except Exception as e:
        raise FriendlyException(f"Failed to save setting: {e}")


@config.command("get")
@click.option("--key", "key", required=True, help="Setting name (e.g. api-key)")
@click.option("--raw", is_flag=True, help="Print without masking")
def config_get(key: str, raw: bool):
    """Show a setting."""
    try:
        cm = ConfigManager()
        value = cm.get(key)
        if value is None:
            raise FriendlyException(f"No such key: {key}")
        if raw:
            click.echo(value)
        else:
            click.echo(cm.mask(str(value)))
    except FriendlyException:
        raise
    except Exception as e:
        raise FriendlyException(f"Failed to read setting: {e}")


@config.command("list")
def config_list():
    """List all settings (values masked)."""
    try:
        cm = ConfigManager()
        data = cm.all()
        if not data:
            click.echo("No config set yet.")
            return
        width = max(len(k) for k in data.keys())
        for k, v in sorted(data.items()):
            click.echo(f"{k.ljust(width)}  =  {cm.mask(str(v))}")
    except Exception as e:
        raise FriendlyException(f"Failed to list settings: {e}")


@config.command("unset")
@click.option("--key", "key", required=True, help="Setting name (e.g. api-key)")
def config_unset(key: str):
    """Remove a setting from the config file."""
    try:
        cm = ConfigManager()
        if not cm.unset(key):
            raise FriendlyException(f"No such key in config file: {key}")
        click.echo(f"Removed: {key}")
    except FriendlyException:
        raise
    except Exception as e:
        raise FriendlyException(f"Failed to remove setting: {e}")


def main():
    try:
        cli(prog_name="promptline")
    except Exception as e:
        # ClickExceptions are handled inside cli(); only unexpected errors reach here
        logging.getLogger(__name__).exception("Unhandled error")
        click.ClickException(f"Unexpected error: {e}").show()
        sys.exit(1)


if __name__ == "__main__":
    main()
