"""Treasury endpoints."""

from fastapi import APIRouter, Depends, Request

from certification.core.platform import CertificationPlatform
from certification.web.deps import get_caller, get_platform, persist
from certification.web.schemas import TreasuryResponse, WithdrawalCreate

router = APIRouter(prefix="/api/treasury", tags=["treasury"])


@router.get("", response_model=TreasuryResponse)
async def get_balance(
    platform: CertificationPlatform = Depends(get_platform),
) -> TreasuryResponse:
    """Current custodied balance."""
    return TreasuryResponse(balance=platform.balance())


@router.post("/withdrawals", response_model=TreasuryResponse)
async def withdraw(
    body: WithdrawalCreate,
    request: Request,
    caller: str = Depends(get_caller),
    platform: CertificationPlatform = Depends(get_platform),
) -> TreasuryResponse:
    """Withdraw custodied fees to the calling admin."""
    remaining = platform.withdraw(caller, body.amount)
    persist(request)
    return TreasuryResponse(balance=remaining)
