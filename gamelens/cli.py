"""Typer CLI: run the gateway, analyze local screenshots, inspect configuration."""

import base64
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from gamelens.ai.factory import get_model_client
from gamelens.core.config import Settings, get_config
from gamelens.core.content_types import IMAGE_MIME_TYPES
from gamelens.core.errors import AnalysisError
from gamelens.core.logging import setup_logging
from gamelens.pipeline.analysis import AnalysisInput, AnalysisPipeline

app = typer.Typer(no_args_is_help=True)


def _load_settings(config: Path | None) -> Settings:
    try:
        return get_config(config)
    except FileNotFoundError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)


def encode_image_file(path: Path) -> str:
    """Read a local image and return it as a base64 data URI."""
    mime = IMAGE_MIME_TYPES.get(path.suffix.lower())
    if mime is None:
        raise ValueError(f"Unsupported image type: {path.name}")
    b64 = base64.b64encode(path.read_bytes()).decode()
    return f"data:{mime};base64,{b64}"


def mask_secret(value: str) -> str:
    if not value:
        return ""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (default from config)"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to gamelens.yml"),
) -> None:
    """Start the HTTP gateway."""
    import uvicorn

    settings = _load_settings(config)
    setup_logging(settings.log_level)
    from gamelens.api.main import app as api_app

    bind_host = host or settings.host
    bind_port = port or settings.port
    typer.echo(f"Server running at http://{bind_host}:{bind_port}")
    uvicorn.run(api_app, host=bind_host, port=bind_port, log_config=None)


@app.command("analyze")
def analyze(
    images: list[Path] = typer.Argument(..., help="Screenshot files, in order"),
    policy: str | None = typer.Option(None, "--policy", help="sequential or batched"),
    vision_prompt: str | None = typer.Option(None, "--vision-prompt", help="Override the Vision stage prompt"),
    thinking_prompt: str | None = typer.Option(None, "--thinking-prompt", help="Override the Reasoning stage prompt"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to gamelens.yml"),
) -> None:
    """Analyze local screenshots and print the result."""
    settings = _load_settings(config)
    setup_logging(settings.log_level)
    if policy is not None and policy not in ("sequential", "batched"):
        typer.secho(f"Unknown policy: {policy}", fg=typer.colors.RED)
        raise typer.Exit(1)

    try:
        encoded = [encode_image_file(p) for p in images]
    except (OSError, ValueError) as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)

    pipeline = AnalysisPipeline(settings, get_model_client(settings))
    try:
        result = pipeline.run(
            AnalysisInput(
                images=encoded,
                vision_prompt=vision_prompt,
                thinking_prompt=thinking_prompt,
                policy=policy,
            )
        )
    except AnalysisError as e:
        typer.secho(f"{e.kind.value}: {e.message}", fg=typer.colors.RED)
        raise typer.Exit(1)
    typer.echo(result.result_text)


@app.command("config")
def show_config(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to gamelens.yml"),
) -> None:
    """Print the effective configuration (API key masked)."""
    settings = _load_settings(config)
    table = Table(title=None)
    table.add_column("Key")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        if key in ("vision_prompt", "thinking_prompt"):
            value = value if len(value) <= 60 else value[:57] + "..."
        elif key == "api_key":
            value = mask_secret(value)
        table.add_row(key, str(value))
    table.add_row("effective_thinking_model", settings.effective_thinking_model)
    console = Console()
    console.print(table)


if __name__ == "__main__":
    app()
