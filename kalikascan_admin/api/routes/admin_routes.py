"""
Admin account routes.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field, StrictBool

from kalikascan_admin.core.admins import AdminAccountService
from kalikascan_admin.infrastructure.dependencies import (
    get_admin_account_service,
    handle_exceptions,
    require_admin,
    require_superadmin,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class CreateAdminRequest(BaseModel):
    email: Optional[str] = Field(None, description="Login email of the new admin")
    password: Optional[str] = Field(None, description="Initial password")
    displayName: Optional[str] = Field(None, description="Display name, 'Admin' when omitted")


class ToggleDisabledRequest(BaseModel):
    uid: Optional[str] = Field(None, description="Account to enable or disable")
    disabled: Optional[StrictBool] = Field(None, description="New disabled state")


@router.post("/create-admin", summary="Create an admin account")
@handle_exceptions
def create_admin(
    payload: CreateAdminRequest = Body(...),
    caller: Dict[str, Any] = Depends(require_admin),
    service: AdminAccountService = Depends(get_admin_account_service)
):
    """
    Create a Firebase Auth user carrying the `admin` claim and record it
    under `admins/{uid}`.
    """
    return service.create_admin(payload.email, payload.password, payload.displayName, created_by=caller["uid"])


@router.get("/list-admins", summary="List admin accounts")
@handle_exceptions
def list_admins(
    caller: Dict[str, Any] = Depends(require_admin),
    service: AdminAccountService = Depends(get_admin_account_service)
):
    return {"admins": service.list_admins()}


@router.post("/toggle-disabled", summary="Enable or disable an admin account")
@handle_exceptions
def toggle_disabled(
    payload: ToggleDisabledRequest = Body(...),
    caller: Dict[str, Any] = Depends(require_superadmin),
    service: AdminAccountService = Depends(get_admin_account_service)
):
    """Superadmins only. Neither the caller nor another superadmin can be disabled."""
    return service.toggle_disabled(caller["uid"], payload.uid, payload.disabled)
