"""Users router: profile sync and self-service account endpoints."""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from pitchdeck.api.deps import get_db, get_token_claims
from pitchdeck.controllers import user_controller
from pitchdeck.schemas.auth import IdentityClaims
from pitchdeck.schemas.common import ApiResponse
from pitchdeck.schemas.user import UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=ApiResponse[UserRead])
async def get_profile(
    claims: IdentityClaims = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
):
    """Return the caller's profile, creating it on first sight."""
    user = await user_controller.sync_user(claims, db)
    return ApiResponse(data=UserRead.model_validate(user))


@router.put("/profile", response_model=ApiResponse[UserRead])
async def update_profile(
    payload: UserUpdate,
    claims: IdentityClaims = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
):
    user = await user_controller.update_profile(claims, payload, db)
    return ApiResponse(message="Profile updated successfully", data=UserRead.model_validate(user))


@router.post("/sync", response_model=ApiResponse[UserRead])
async def sync_user(
    claims: IdentityClaims = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
):
    """Upsert the local user from the identity token (called after sign-in)."""
    user = await user_controller.sync_user(claims, db, refresh_name=True)
    return ApiResponse(message="User profile synced successfully", data=UserRead.model_validate(user))


@router.delete("/account", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    claims: IdentityClaims = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
):
    """Delete the caller's account and every deck they own."""
    await user_controller.delete_account(claims, db)
