"""Admin API Router - Targets, Managed Accounts, Credentials, Rotation."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from rotator.dependencies import get_account_service, get_rotation_service, get_target_service
from rotator.domain.accounts import AccountService
from rotator.domain.errors import RotationError
from rotator.domain.models import MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH
from rotator.domain.secrets.rotation import RotationService
from rotator.domain.targets import TargetService
from rotator.errors import raise_from_domain, raise_rotator_error
from rotator.middleware.auth_admin import require_admin

router = APIRouter()


class TargetWrite(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: Optional[str] = None
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None
    semp_version: Optional[str] = None
    tls_skip_verify: Optional[bool] = None


class AccountWrite(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target: Optional[str] = None
    remote_username: Optional[str] = None
    rotation_period: Optional[int] = Field(default=None, ge=0)
    password_length: Optional[int] = Field(default=None, ge=MIN_PASSWORD_LENGTH, le=MAX_PASSWORD_LENGTH)


class RotateResponse(BaseModel):
    name: str
    last_rotated: datetime


# ============ Targets ============

@router.get("/targets")
async def list_targets(
    principal: str = Depends(require_admin),
    service: TargetService = Depends(get_target_service)
):
    return {"targets": await service.list()}


@router.get("/targets/{name}")
async def get_target(
    name: str,
    principal: str = Depends(require_admin),
    service: TargetService = Depends(get_target_service)
):
    target = await service.read(name)
    if target is None:
        raise_rotator_error("NOT_FOUND", 404, f"target {name!r} not found")
    return target


@router.put("/targets/{name}")
async def put_target(
    name: str,
    body: TargetWrite,
    principal: str = Depends(require_admin),
    service: TargetService = Depends(get_target_service)
):
    try:
        target = await service.write(name, body.model_dump(exclude_none=True))
    except RotationError as e:
        raise_from_domain(e)
    return target.redacted()


@router.delete("/targets/{name}")
async def delete_target(
    name: str,
    principal: str = Depends(require_admin),
    service: TargetService = Depends(get_target_service)
):
    try:
        await service.delete(name)
    except RotationError as e:
        raise_from_domain(e)
    return {"success": True}


# ============ Managed Accounts ============

@router.get("/accounts")
async def list_accounts(
    principal: str = Depends(require_admin),
    service: AccountService = Depends(get_account_service)
):
    return {"accounts": await service.list()}


@router.get("/accounts/{name}")
async def get_account(
    name: str,
    principal: str = Depends(require_admin),
    service: AccountService = Depends(get_account_service)
):
    account = await service.read(name)
    if account is None:
        raise_rotator_error("NOT_FOUND", 404, f"account {name!r} not found")
    return account


@router.put("/accounts/{name}")
async def put_account(
    name: str,
    body: AccountWrite,
    principal: str = Depends(require_admin),
    service: AccountService = Depends(get_account_service)
):
    try:
        account = await service.write(name, body.model_dump(exclude_none=True))
    except RotationError as e:
        raise_from_domain(e)
    return account.config_view()


@router.delete("/accounts/{name}")
async def delete_account(
    name: str,
    principal: str = Depends(require_admin),
    service: AccountService = Depends(get_account_service)
):
    await service.delete(name)
    return {"success": True}


# ============ Credentials & Rotation ============

@router.get("/creds/{name}")
async def read_credentials(
    name: str,
    principal: str = Depends(require_admin),
    service: AccountService = Depends(get_account_service)
):
    try:
        creds = await service.read_credentials(name)
    except RotationError as e:
        raise_from_domain(e)
    return creds


@router.post("/rotate/{name}", response_model=RotateResponse)
async def rotate_account(
    name: str,
    principal: str = Depends(require_admin),
    service: RotationService = Depends(get_rotation_service)
):
    """Rotate the account's password now and wait for the outcome."""
    try:
        account = await service.rotate(name)
    except RotationError as e:
        raise_from_domain(e)
    return RotateResponse(name=name, last_rotated=account.last_rotated)
