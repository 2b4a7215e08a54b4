from fastapi import HTTPException
from sqlalchemy import select
from sqlmodel.ext.asyncio.session import AsyncSession

from pitchdeck.core.security import get_user_by_uid
from pitchdeck.models.user import User
from pitchdeck.schemas.auth import IdentityClaims
from pitchdeck.schemas.user import UserUpdate


async def sync_user(claims: IdentityClaims, db: AsyncSession, refresh_name: bool = False) -> User:
    """Create the local user for a verified identity, or refresh its email.

    The display name is only overwritten from the token when *refresh_name*
    is set; otherwise the profile keeps whatever the user chose.
    """
    user = await get_user_by_uid(claims.uid, db)

    if claims.email:
        result = await db.execute(select(User).where(User.email == claims.email))
        owner = result.scalar_one_or_none()
        if owner and (user is None or owner.id != user.id):
            raise HTTPException(status_code=409, detail="Email is already linked to another account")

    if user is None:
        user = User(firebase_uid=claims.uid, email=claims.email, name=claims.name)
    else:
        if claims.email:
            user.email = claims.email
        if refresh_name and claims.name:
            user.name = claims.name

    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def update_profile(claims: IdentityClaims, payload: UserUpdate, db: AsyncSession) -> User:
    user = await get_user_by_uid(claims.uid, db)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if payload.name is not None:
        user.name = payload.name.strip()
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def delete_account(claims: IdentityClaims, db: AsyncSession) -> None:
    """Delete the user; their decks go with them."""
    user = await get_user_by_uid(claims.uid, db)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    await db.delete(user)
    await db.flush()
