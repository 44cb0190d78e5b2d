"""Mini README: FastAPI service exposing the revenue ledger.

Structure:
    * create_application - application factory wiring routes to a registry.
    * _default_ledger - builds a ledger from settings, preferring saved state.

Every ledger the service knows about lives in a ``LedgerRegistry``. Routes act
on the primary ledger unless a ``ledger`` query parameter names another
registered address; ``POST /ledgers`` deploys and registers a new one.
Callers identify themselves with a ``caller`` form field; the ledger decides
whether they are allowed to act. Amounts travel as wei strings, with an
optional ``amount_eth`` convenience field for human input.
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Form, HTTPException
from fastapi.responses import JSONResponse

from ..configuration import get_settings
from ..deployment import LedgerRegistry, deploy_ledger, load_ledger_state
from ..ledger import (
    InvalidAmount,
    LedgerError,
    NothingToWithdraw,
    PayoutFailed,
    RevenueLedger,
    Unauthorized,
    ZeroAmount,
)
from ..logging_utils import configure_root_logger, get_logger
from ..units import SYMBOL, format_ether, parse_ether

LOGGER = get_logger(__name__)


def _default_ledger() -> RevenueLedger:
    """Load persisted state when present, otherwise build from settings."""

    settings = get_settings()
    if settings.state_path.exists():
        LOGGER.info("Loading ledger state from %s", settings.state_path)
        return load_ledger_state(settings.state_path)
    return RevenueLedger(
        settings.company_address,
        settings.platform_address,
        settings.creator_address,
        settings.platform_share,
        settings.creator_share,
    )


def create_application(
    ledger: Optional[RevenueLedger] = None,
    *,
    registry: Optional[LedgerRegistry] = None,
) -> FastAPI:
    """Create the FastAPI application with ``ledger`` as the primary ledger."""

    configure_root_logger()
    app = FastAPI(title="Revenue Sharing Ledger", version="0.1.0")
    primary = ledger if ledger is not None else _default_ledger()
    ledgers = registry if registry is not None else LedgerRegistry()
    if primary.address not in ledgers.addresses():
        ledgers.register(primary)
    app.state.ledger = primary
    app.state.registry = ledgers

    def resolve(address: Optional[str]) -> RevenueLedger:
        if not address:
            return primary
        try:
            return ledgers.get(address)
        except (KeyError, LedgerError) as error:
            raise HTTPException(status_code=404, detail=f"Unknown ledger '{address}'") from error

    @app.get("/ledgers")
    async def list_ledgers() -> JSONResponse:
        """List registered ledger addresses and the primary one."""

        return JSONResponse({"primary": primary.address, "ledgers": list(ledgers.addresses())})

    @app.post("/ledgers")
    async def create_ledger(
        company: str = Form(...),
        platform: str = Form(...),
        creator: str = Form(...),
        platform_share: int = Form(...),
        creator_share: int = Form(...),
    ) -> JSONResponse:
        """Deploy a new ledger and register it for later lookup."""

        try:
            created, record = deploy_ledger(
                company,
                platform,
                creator,
                platform_share,
                creator_share,
                network=get_settings().network,
            )
        except LedgerError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        ledgers.register(created)
        LOGGER.info("Registered ledger %s via HTTP", created.address)
        return JSONResponse(record.model_dump(mode="json", by_alias=True), status_code=201)

    @app.get("/info")
    async def info(ledger: Optional[str] = None) -> JSONResponse:
        """Return the configuration and current pool value."""

        target = resolve(ledger)
        details = target.get_info()
        payload = details.as_dict()
        payload["address"] = target.address
        payload["pool_value"] = str(details.pool_value)
        payload["pool_value_formatted"] = f"{format_ether(details.pool_value)} {SYMBOL}"
        return JSONResponse(payload)

    @app.get("/balances/{identity}")
    async def balance(identity: str, ledger: Optional[str] = None) -> JSONResponse:
        """Return the withdrawable credit and role of ``identity``."""

        target = resolve(ledger)
        credit = target.check_balance(identity)
        return JSONResponse(
            {
                "identity": identity,
                "role": target.role_of(identity).value,
                "balance": str(credit),
                "balance_formatted": f"{format_ether(credit)} {SYMBOL}",
            }
        )

    @app.post("/fund")
    async def fund(
        caller: str = Form(...),
        amount: Optional[int] = Form(None),
        amount_eth: Optional[str] = Form(None),
        ledger: Optional[str] = None,
    ) -> JSONResponse:
        """Fund the pool as ``caller`` and return the resulting split."""

        target = resolve(ledger)
        if amount is None and amount_eth is None:
            raise HTTPException(status_code=400, detail="Provide amount or amount_eth")
        try:
            value = amount if amount is not None else parse_ether(amount_eth)
            platform_amount, creator_amount = target.fund(caller, value)
        except Unauthorized as error:
            raise HTTPException(status_code=403, detail=str(error)) from error
        except (ZeroAmount, InvalidAmount, ValueError) as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        LOGGER.info("Funding of %s accepted via HTTP", value)
        return JSONResponse(
            {
                "amount": str(value),
                "platform_amount": str(platform_amount),
                "creator_amount": str(creator_amount),
                "pool_value": str(target.pool_value),
            }
        )

    @app.post("/withdraw")
    async def withdraw(caller: str = Form(...), ledger: Optional[str] = None) -> JSONResponse:
        """Withdraw the caller's full credit."""

        target = resolve(ledger)
        try:
            amount = target.withdraw(caller)
        except Unauthorized as error:
            raise HTTPException(status_code=403, detail=str(error)) from error
        except NothingToWithdraw as error:
            raise HTTPException(status_code=409, detail=str(error)) from error
        except PayoutFailed as error:
            raise HTTPException(status_code=502, detail=str(error)) from error
        return JSONResponse(
            {
                "recipient": caller,
                "amount": str(amount),
                "amount_formatted": f"{format_ether(amount)} {SYMBOL}",
                "pool_value": str(target.pool_value),
            }
        )

    @app.get("/events")
    async def events(name: Optional[str] = None, ledger: Optional[str] = None) -> JSONResponse:
        """Return emitted events in order, optionally filtered by name."""

        payload = [event.as_dict() for event in resolve(ledger).events.list_events(name)]
        return JSONResponse({"events": payload})

    return app
