from fastapi import APIRouter

from familink.dependencies import CurrentUser
from familink.schemas.user import UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
def read_me(user: CurrentUser):
    return user
