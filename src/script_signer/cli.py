"""Typer-based command line interface for Script Signer."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click
import typer

from .core.exceptions import ScriptSignerError
from .crypto import keys
from .logging import configure_logging
from .services.script_service import ScriptSigningService, read_script
from .utils.config import AppConfig, load_config

app = typer.Typer(help="Script Signer command line interface")


@app.callback()
def main(ctx: typer.Context, config: Optional[Path] = typer.Option(None, "--config", metavar="PATH")) -> None:
    ctx.obj = load_config(config)
    configure_logging(ctx.obj.logging.normalized_level())


def _config() -> AppConfig:
    return click.get_current_context().obj


def _passphrase(value: Optional[str]) -> Optional[bytes]:
    return value.encode("utf-8") if value else None


@app.command()
def keygen(
    private_out: Path = typer.Option(..., "--private-out", help="Write the PEM private key here"),
    public_out: Path = typer.Option(..., "--public-out", help="Write the PEM public key here"),
    passphrase: Optional[str] = typer.Option(
        None, "--passphrase", envvar="SCRIPT_SIGNER_PASSPHRASE", help="Encrypt the private key"
    ),
) -> None:
    """Create an RSA-2048 key pair"""
    pair = keys.generate()
    keys.save_private(pair, private_out, _passphrase(passphrase))
    keys.save_public(pair, public_out)
    typer.echo(f"Created {pair.public.fingerprint}")


@app.command("export-public")
def export_public(
    key: Path = typer.Option(..., "--key", exists=True, readable=True, help="PEM private key"),
    output: Path = typer.Option(..., "-o", "--output", help="Write the PEM public key here"),
    passphrase: Optional[str] = typer.Option(None, "--passphrase", envvar="SCRIPT_SIGNER_PASSPHRASE"),
) -> None:
    """Derive the public key of a private key"""
    pair = keys.load_private(key, _passphrase(passphrase))
    keys.save_public(pair, output)
    typer.echo(f"Exported {pair.public.fingerprint} -> {output}")


@app.command()
def sign(
    input: Path = typer.Option(..., "-i", exists=True, readable=True, help="Script to sign"),
    output: Optional[Path] = typer.Option(None, "-o", help="Signed script (default: <input>.signed)"),
    key: Optional[Path] = typer.Option(None, "--key", help="PEM private key (default: keys.private_key)"),
    passphrase: Optional[str] = typer.Option(None, "--passphrase", envvar="SCRIPT_SIGNER_PASSPHRASE"),
) -> None:
    """Embed a signature of the script's canonical code"""
    target = output or input.with_name(input.name + ".signed")
    service = ScriptSigningService(_config())
    try:
        service.sign_file(input, target, key, _passphrase(passphrase))
    except (ScriptSignerError, ValueError) as exc:
        typer.echo(f"Sign FAILED: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Signed -> {target}")


@app.command()
def verify(
    input: Path = typer.Option(..., "-i", exists=True, readable=True, help="Signed script"),
    pub: Optional[Path] = typer.Option(None, "--pub", help="PEM public key (default: keys.public_key)"),
) -> None:
    """Verify the signature embedded in a script"""
    result = ScriptSigningService(_config()).verify_file(input, pub)
    if result.valid:
        typer.echo("Verify OK")
        raise typer.Exit(code=0)
    typer.echo(f"Verify FAILED ({result.error.value}) {result.detail}".rstrip())
    raise typer.Exit(code=2)


@app.command()
def params(input: Path = typer.Option(..., "-i", exists=True, readable=True)) -> None:
    """Print the directive parameters as JSON"""
    mapping = ScriptSigningService(_config()).parameters(read_script(input))
    typer.echo(json.dumps(mapping, ensure_ascii=False, indent=2, sort_keys=True))


@app.command()
def canonicalize(input: Path = typer.Option(..., "-i", exists=True, readable=True)) -> None:
    """Print the code that gets signed"""
    service = ScriptSigningService(_config())
    typer.echo(service.canonicalizer.canonical_code(read_script(input)))


@app.command()
def version() -> None:
    from .version import __version__

    typer.echo(f"script-signer {__version__}")


if __name__ == "__main__":  # pragma: no cover
    app()
