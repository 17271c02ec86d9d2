"""
Administrative endpoints for managing operator accounts.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backoffice.api.schemas.auth import UserResponse
from backoffice.api.schemas.shared import PaginationMeta
from backoffice.api.schemas.users import (
    AdminCreateUserRequest,
    AdminListUsersResponse,
    AdminUpdateUserRequest,
)
from backoffice.core.config import settings
from backoffice.core.security import (
    User,
    create_user,
    delete_user,
    get_user_or_404,
    require_admin,
    update_user,
)
from backoffice.db.session import get_db
from backoffice.domain.queries.pagination import build_page_query, fetch_page, page_meta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@router.get("", response_model=AdminListUsersResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    List users, newest first. ``search`` matches the username.
    """
    table = User.__table__
    query = build_page_query(
        table,
        ["username"],
        page=page,
        limit=limit,
        search=search,
        order_by=(table.c.created_at.desc(), table.c.id.desc()),
        default_limit=settings.user_page_size_default,
        max_limit=settings.user_page_size_max,
    )
    rows, total = fetch_page(db, table, query)
    return AdminListUsersResponse(
        data=[UserResponse.model_validate(row) for row in rows],
        meta=PaginationMeta(**page_meta(query, total)),
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_admin(
    user_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return UserResponse.model_validate(get_user_or_404(db, user_id))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user_admin(
    request: AdminCreateUserRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create an admin or operator account.
    """
    user = create_user(
        db=db,
        username=request.username,
        password=request.password,
        role=request.role,
        is_active=request.is_active,
    )
    logger.info("User '%s' created by '%s'", user.username, current_user.username)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user_admin(
    user_id: int,
    request: AdminUpdateUserRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Partially update a user. Admins cannot demote or deactivate themselves.
    """
    if user_id == current_user.id and (
        (request.role is not None and request.role != current_user.role)
        or request.is_active is False
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot change your own role or deactivate your own account",
        )

    updated_user = update_user(
        db=db,
        user_id=user_id,
        username=request.username,
        password=request.password,
        role=request.role,
        is_active=request.is_active,
    )
    return UserResponse.model_validate(updated_user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_admin(
    user_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Delete a user. Admins cannot delete their own account.
    """
    if current_user.id == user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )

    if not delete_user(db, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {user_id} not found",
        )
    logger.info("User %s deleted by '%s'", user_id, current_user.username)
