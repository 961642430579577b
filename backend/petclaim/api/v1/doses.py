"""Public dose confirmation endpoints reached from SMS and email links."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from petclaim.api import deps
from petclaim.schemas.dose import (
    DoseConfirmRequest,
    DoseLinkView,
    DoseMedicationSummary,
    DosePetSummary,
    DoseRead,
)
from petclaim.services import dose_token_service
from petclaim.services.dose_token_service import DoseLookup

router = APIRouter(prefix="/doses")

LINK_INVALID_DETAIL = "This link is no longer valid"


def _to_view(lookup: DoseLookup) -> DoseLinkView:
    # Unknown, consumed and expired links share one response.
    if not lookup.is_valid or lookup.dose is None:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=LINK_INVALID_DETAIL)
    dose = lookup.dose
    medication = dose.medication
    return DoseLinkView(
        dose=DoseRead.model_validate(dose),
        medication=DoseMedicationSummary.model_validate(medication),
        pet=DosePetSummary.model_validate(medication.pet),
    )


@router.get(
    "/by-token/{token}",
    response_model=DoseLinkView,
    summary="Look up a pending dose by one-time token",
)
async def get_dose_by_token(
    token: str,
    session: Annotated[AsyncSession, Depends(deps.get_public_db_session)],
) -> DoseLinkView:
    lookup = await dose_token_service.lookup_dose_by_token(session, token)
    return _to_view(lookup)


@router.get(
    "/by-short-code/{short_code}",
    response_model=DoseLinkView,
    summary="Look up a pending dose by SMS short code",
)
async def get_dose_by_short_code(
    short_code: str,
    session: Annotated[AsyncSession, Depends(deps.get_public_db_session)],
) -> DoseLinkView:
    lookup = await dose_token_service.lookup_dose_by_short_code(session, short_code)
    return _to_view(lookup)


@router.post(
    "/confirm",
    response_model=DoseLinkView,
    summary="Mark a dose as given",
)
async def confirm_dose(
    payload: DoseConfirmRequest,
    session: Annotated[AsyncSession, Depends(deps.get_public_db_session)],
) -> DoseLinkView:
    if payload.token:
        lookup = await dose_token_service.confirm_dose(session, payload.token)
    elif payload.short_code:
        lookup = await dose_token_service.confirm_dose_by_short_code(
            session, payload.short_code
        )
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A token or short code is required",
        )
    return _to_view(lookup)
