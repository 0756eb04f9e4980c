from uuid import UUID

from fastapi import APIRouter, Depends, Response

from core.auth import security
from core.deps import get_current_user_id, get_user_service
from schemas.auth import UpdatePasswordIn, UpdateUserIn, UserOut
from services.user_services import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserOut)
async def me(
    user_id: UUID = Depends(get_current_user_id),
    svc: UserService = Depends(get_user_service),
):
    return UserOut.model_validate(svc.get_user(user_id), from_attributes=True)


@router.put("/me", response_model=UserOut)
async def update_me(
    data: UpdateUserIn,
    user_id: UUID = Depends(get_current_user_id),
    svc: UserService = Depends(get_user_service),
):
    user = svc.update_profile(user_id, email=data.email, login=data.login)
    return UserOut.model_validate(user, from_attributes=True)


@router.put("/me/password", status_code=204)
async def update_password(
    data: UpdatePasswordIn,
    user_id: UUID = Depends(get_current_user_id),
    svc: UserService = Depends(get_user_service),
):
    svc.update_password(user_id, current_password=data.current_password, new_password=data.new_password)
    return Response(status_code=204)


@router.delete("/me", status_code=204)
async def delete_me(
    user_id: UUID = Depends(get_current_user_id),
    svc: UserService = Depends(get_user_service),
):
    svc.delete_user(user_id)
    response = Response(status_code=204)
    security.unset_cookies(response)
    return response
