from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from datetime import timedelta
import logging
from stockpanel.db import USERS, get_db
from stockpanel.models.user import UserCreate, UserLogin, UserOut, Token
from stockpanel.core.config import settings
from stockpanel.core.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

async def _issue_token(db, email: str, password: str) -> Token:
    db_user = await db[USERS].find_one({"email": email})
    if not db_user or not verify_password(password, db_user.get("password", "")):
        logger.warning("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    access_token = create_access_token(
        data={"sub": db_user["email"]},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes)
    )
    return Token(access_token=access_token)

@router.post("/signup", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def signup(user: UserCreate, db=Depends(get_db)):
    existing = await db[USERS].find_one({"email": user.email})
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    user_dict = user.model_dump()
    user_dict["password"] = hash_password(user.password)
    user_dict["nombre"] = user.username

    res = await db[USERS].insert_one(user_dict)
    logger.info("User %s registered", user.email)
    return UserOut(id=str(res.inserted_id), username=user.username, email=user.email)

@router.post("/login", response_model=Token)
async def login(user: UserLogin, db=Depends(get_db)):
    return await _issue_token(db, user.email, user.password)

@router.post("/token", response_model=Token)
async def token(form: OAuth2PasswordRequestForm = Depends(), db=Depends(get_db)):
    """OAuth2 form login (username field carries the email)."""
    return await _issue_token(db, form.username, form.password)
