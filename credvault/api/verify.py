"""Public verification endpoints (no session needed).

GET /v1/verify          resolve ?address=…[&credentialId=…] against the ledger
GET /v1/verify/url      build a verification or profile link
GET /v1/verify/parse    read the parameters back out of a link
"""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel

from credvault.api.credentials import CredentialOut
from credvault.api.dependencies import credential_repo
from credvault.services import verification_service

router = APIRouter(prefix="/v1/verify", tags=["verify"])


class VerifyOut(BaseModel):
    address: str
    credentialId: str | None
    valid: bool
    credential: CredentialOut | None
    credentials: list[CredentialOut]


class UrlOut(BaseModel):
    url: str
    displayUrl: str


class ParamsOut(BaseModel):
    address: str | None
    credentialId: str | None
    type: str | None
    issuer: str | None


@router.get("", response_model=VerifyOut)
def verify(
    address: str | None = Query(None),
    credentialId: str | None = Query(None),
) -> VerifyOut:
    result = verification_service.verify_credential(
        credential_repo, address, credentialId
    ).unwrap()
    return VerifyOut(
        address=result.address,
        credentialId=result.credential_id,
        valid=result.valid,
        credential=CredentialOut.of(result.credential) if result.credential else None,
        credentials=[CredentialOut.of(c) for c in result.credentials],
    )


@router.get("/url", response_model=UrlOut)
def verification_url(
    address: str | None = Query(None),
    credentialId: str | None = Query(None),
    baseUrl: str | None = Query(None),
) -> UrlOut:
    if credentialId is None:
        result = verification_service.generate_profile_url(address, baseUrl)
    else:
        result = verification_service.generate_verification_url(
            address, credentialId, baseUrl
        )
    url = result.unwrap()
    return UrlOut(url=url, displayUrl=verification_service.sanitize_url_for_display(url))


@router.get("/parse", response_model=ParamsOut)
def parse_url(location: str = Query(...)) -> ParamsOut:
    params = verification_service.parse_url_params(location)
    return ParamsOut(
        address=params.address,
        credentialId=params.credential_id,
        type=params.type,
        issuer=params.issuer,
    )
