"""
StarChain - Command Line Interface
====================================
CLI per chiavi, challenge, firma e demo del registry.

Security Level: MEDIUM
Last Updated: 2026-10-19
Version: 1.0.0

Commands:
- keygen: Genera keypair e address
- challenge: Emetti messaggio challenge
- sign: Firma un messaggio con keypair salvata
- demo: Chain in-memory con star firmate
- hash-block: Hash canonico di un blocco
"""

import json
import typer
from typing import Optional
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Internal imports
from star_chain.domain.keypairs import KeyPair
from star_chain.domain.models import Block
from star_chain.domain.ownership import OwnershipVerifier
from star_chain.services.star_service import StarRegistryService
from star_chain.config import override_settings
from star_chain.errors import StarChainException
from star_chain.logging_setup import setup_logging
from star_chain.utils.serialization import encode_payload


# ============================================================================
# CLI APP
# ============================================================================

app = typer.Typer(
    name="starchain",
    help="StarChain - Star Registry CLI",
    add_completion=False
)

console = Console()


# ============================================================================
# KEY COMMANDS
# ============================================================================

@app.command("keygen")
def keygen(
    network: str = typer.Option(
        "mainnet",
        "--network",
        "-n",
        help="Network (mainnet/testnet/regtest)"
    ),
    save: Optional[Path] = typer.Option(
        None,
        "--save",
        "-s",
        help="Salva keypair (chiave privata inclusa) in JSON"
    )
):
    """Generate a new key pair"""
    try:
        config = override_settings(network=network)
        keypair = KeyPair.generate(config.get_address_version())

        if save:
            save.write_text(json.dumps(keypair.to_dict(include_private=True), indent=2))

        console.print(Panel.fit(
            f"Address: [cyan]{keypair.address}[/cyan]\n"
            f"Public key: [cyan]{keypair.get_public_key_hex()}[/cyan]"
            + (f"\nSaved to: [cyan]{save}[/cyan]" if save else ""),
            title="New Key Pair",
            border_style="green"
        ))

    except Exception as e:
        console.print(f"[red]Error generating key pair: {e}[/red]")
        raise typer.Exit(1)


@app.command("challenge")
def challenge(
    address: str = typer.Argument(..., help="Address del claimant")
):
    """Issue an ownership challenge message"""
    try:
        ownership = OwnershipVerifier(override_settings())
        console.print(ownership.request_challenge(address), soft_wrap=True)

    except StarChainException as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command("sign")
def sign(
    message: str = typer.Argument(..., help="Messaggio challenge"),
    key_file: Path = typer.Option(
        ...,
        "--key-file",
        "-k",
        help="Keypair JSON creata con keygen --save"
    )
):
    """Sign a challenge message"""
    try:
        keypair = KeyPair.from_dict(json.loads(key_file.read_text()))
        console.print(keypair.sign_message(message), soft_wrap=True)

    except (OSError, ValueError, KeyError, StarChainException) as e:
        console.print(f"[red]Error signing message: {e}[/red]")
        raise typer.Exit(1)


# ============================================================================
# CHAIN COMMANDS
# ============================================================================

@app.command("demo")
def demo(
    stars: int = typer.Option(3, "--stars", help="Numero star da registrare", min=0),
    network: str = typer.Option("regtest", "--network", "-n", help="Network")
):
    """Build an in-memory chain and register signed stars"""
    try:
        config = override_settings(network=network)
        service = StarRegistryService(config)
        keypair = KeyPair.generate(config.get_address_version())

        for index in range(stars):
            message = service.request_challenge(keypair.address)
            service.submit_star(
                keypair.address,
                message,
                keypair.sign_message(message),
                {"name": f"Star {index + 1}", "ra": f"{index}h 29m 1.0s"}
            )

        table = Table(title=f"Chain ({service.get_height() + 1} blocks)")
        table.add_column("Height", justify="right", style="cyan")
        table.add_column("Hash", style="green")
        table.add_column("Previous", style="yellow")
        table.add_column("Payload", style="magenta")

        for block in service.blockchain.blocks:
            table.add_row(
                str(block.height),
                block.hash[:16] + "...",
                (block.previous_hash[:16] + "...") if block.previous_hash else "-",
                json.dumps(block.decode_payload(), ensure_ascii=False)
            )

        console.print(table)

        issues = service.validate_chain()
        if issues:
            for issue in issues:
                console.print(f"[red]{issue}[/red]")
        else:
            console.print("[green]Chain is valid[/green]")

        owned = service.get_stars_by_owner(keypair.address)
        console.print(f"Stars owned by [cyan]{keypair.address}[/cyan]: {len(owned)}")

    except StarChainException as e:
        console.print(f"[red]Demo failed: {e}[/red]")
        raise typer.Exit(1)


@app.command("hash-block")
def hash_block(
    payload: str = typer.Option(..., "--payload", help="Payload JSON"),
    height: int = typer.Option(..., "--height", help="Height blocco"),
    time: int = typer.Option(..., "--time", help="Unix timestamp"),
    previous_hash: Optional[str] = typer.Option(
        None,
        "--previous-hash",
        help="Hash blocco precedente (omesso per genesis)"
    )
):
    """Print the canonical hash for the given block fields"""
    try:
        data = encode_payload(json.loads(payload))
    except (ValueError, StarChainException) as e:
        console.print(f"[red]Invalid payload: {e}[/red]")
        raise typer.Exit(1)

    console.print(Block.compute_hash(data, previous_hash, height, time), soft_wrap=True)


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose output"
    )
):
    """
    StarChain - Star Registry CLI

    Genera chiavi, firma challenge e ispeziona una chain dimostrativa.
    """
    setup_logging(log_level="DEBUG" if verbose else "WARNING", enable_console=verbose)
    if verbose:
        console.print("[dim]Verbose mode enabled[/dim]")


if __name__ == "__main__":
    app()


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "app",
]
