from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from ..database import get_db
from ..services.tokens import issue_token
from ..services.users import register_user, verify_credentials
from .schemas import Credentials, TokenResponse, UserOut

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def post_user(payload: Credentials, db: Session = Depends(get_db)) -> UserOut:
    user = register_user(db, payload.username, payload.password)
    return UserOut.model_validate(user)


@router.post("/auth", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def auth_user(payload: Credentials, db: Session = Depends(get_db)) -> TokenResponse:
    user = verify_credentials(db, payload.username, payload.password)
    token = issue_token(db, user.username)
    return TokenResponse(token=token)
