"""Mini README: Command line entry point for the revenue sharing ledger.

Commands:
    * serve - run the FastAPI service with uvicorn.
    * deploy - construct a ledger and persist its deployment record and state.
    * demo - fund the deployed ledger and print the resulting balances.
    * withdraw - withdraw a payee's credit from the deployed ledger.
    * info - print configuration and balances of the deployed ledger.

State lives in the configured data directory so consecutive commands operate
on the same ledger.
"""

from __future__ import annotations

from typing import Optional

import typer
import uvicorn

from revshare.configuration import get_settings
from revshare.deployment import (
    deploy_ledger,
    load_deployment,
    load_ledger_state,
    save_deployment,
    save_ledger_state,
)
from revshare.ledger import LedgerError, RevenueLedger
from revshare.logging_utils import configure_root_logger
from revshare.units import SYMBOL, format_ether, parse_ether

cli = typer.Typer(help="Deploy, fund and inspect the revenue sharing ledger.")


def _load_ledger() -> RevenueLedger:
    settings = get_settings()
    try:
        record = load_deployment(settings.deployment_path)
        ledger = load_ledger_state(settings.state_path)
    except FileNotFoundError as error:
        typer.echo(str(error), err=True)
        raise typer.Exit(code=1) from error
    if ledger.address != record.contract_address:
        typer.echo(
            f"State file belongs to {ledger.address}, deployment is {record.contract_address}",
            err=True,
        )
        raise typer.Exit(code=1)
    return ledger


def _print_info(ledger: RevenueLedger) -> None:
    info = ledger.get_info()
    typer.echo(f"Ledger Address: {ledger.address}")
    typer.echo(f"- Company: {info.company}")
    typer.echo(f"- Platform: {info.platform}")
    typer.echo(f"- Creator: {info.creator}")
    typer.echo(f"- Platform Share: {info.platform_share}%")
    typer.echo(f"- Creator Share: {info.creator_share}%")
    typer.echo(f"- Pool Value: {format_ether(info.pool_value)} {SYMBOL}")
    typer.echo(f"- Platform Balance: {format_ether(ledger.check_balance(info.platform))} {SYMBOL}")
    typer.echo(f"- Creator Balance: {format_ether(ledger.check_balance(info.creator))} {SYMBOL}")


@cli.command()
def serve(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(False, help="Disable auto-reload."),
) -> None:
    """Start the HTTP service using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger()
    typer.echo(f"Starting revenue ledger service on {effective_host}:{effective_port}")
    uvicorn.run(
        "revshare.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def deploy(
    company: Optional[str] = typer.Option(None, help="Depositor identity."),
    platform: Optional[str] = typer.Option(None, help="Platform payee identity."),
    creator: Optional[str] = typer.Option(None, help="Creator payee identity."),
    platform_share: Optional[int] = typer.Option(None, help="Platform percentage."),
    creator_share: Optional[int] = typer.Option(None, help="Creator percentage."),
) -> None:
    """Construct a ledger and save its deployment record and initial state."""

    settings = get_settings()
    try:
        ledger, record = deploy_ledger(
            company or settings.company_address,
            platform or settings.platform_address,
            creator or settings.creator_address,
            settings.platform_share if platform_share is None else platform_share,
            settings.creator_share if creator_share is None else creator_share,
            network=settings.network,
        )
    except LedgerError as error:
        typer.echo(f"Deployment failed: {error}", err=True)
        raise typer.Exit(code=1) from error
    save_deployment(record, settings.deployment_path)
    save_ledger_state(ledger, settings.state_path)
    typer.echo("=== Deployment Successful ===")
    _print_info(ledger)
    typer.echo(f"Deployment info saved to {settings.deployment_path}")


@cli.command()
def demo(
    amount: str = typer.Option("1.0", help=f"Amount in {SYMBOL} the company deposits."),
) -> None:
    """Fund the deployed ledger as the company and show the split."""

    settings = get_settings()
    ledger = _load_ledger()
    typer.echo("=== Revenue Sharing Demo ===")
    _print_info(ledger)
    try:
        value = parse_ether(amount)
        platform_amount, creator_amount = ledger.fund(ledger.company, value)
    except (LedgerError, ValueError) as error:
        typer.echo(f"Deposit failed: {error}", err=True)
        raise typer.Exit(code=1) from error
    save_ledger_state(ledger, settings.state_path)
    typer.echo(f"\n=== Deposited {format_ether(value)} {SYMBOL} ===")
    typer.echo(f"- Platform received: {format_ether(platform_amount)} {SYMBOL}")
    typer.echo(f"- Creator received: {format_ether(creator_amount)} {SYMBOL}")
    typer.echo(f"- Pool Value: {format_ether(ledger.pool_value)} {SYMBOL}")


@cli.command()
def withdraw(caller: str = typer.Argument(..., help="Payee identity withdrawing.")) -> None:
    """Withdraw the full credit of a payee from the deployed ledger."""

    settings = get_settings()
    ledger = _load_ledger()
    try:
        amount = ledger.withdraw(caller)
    except LedgerError as error:
        typer.echo(f"Withdrawal failed: {error}", err=True)
        raise typer.Exit(code=1) from error
    save_ledger_state(ledger, settings.state_path)
    typer.echo(f"Withdrew {format_ether(amount)} {SYMBOL} to {caller}")


@cli.command()
def info() -> None:
    """Print configuration and balances of the deployed ledger."""

    _print_info(_load_ledger())


if __name__ == "__main__":
    cli()
