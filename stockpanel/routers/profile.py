from fastapi import APIRouter, Depends, HTTPException
import logging
from pymongo.errors import PyMongoError
from stockpanel.db import USERS, get_db, object_id
from stockpanel.core.security import get_session
from stockpanel.models.user import Session, UserProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])

async def _read_profile(db, session: Session) -> UserProfile:
    doc = await db[USERS].find_one({"_id": object_id(session.user_id, "user")}) or {}
    return UserProfile(
        nombre=doc.get("nombre") or session.username,
        email=doc.get("email") or session.email,
        telefono=doc.get("telefono") or "",
        direccion=doc.get("direccion") or "",
    )

@router.get("/", response_model=UserProfile)
async def get_profile(session: Session = Depends(get_session), db=Depends(get_db)):
    return await _read_profile(db, session)

@router.put("/", response_model=UserProfile)
async def update_profile(profile: UserProfile, session: Session = Depends(get_session), db=Depends(get_db)):
    """
    Merge the fields sent into the user document; fields left out keep their value.
    The email doubles as the login name, so changing it needs a new login.
    """
    changes = profile.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes and changes["email"] != session.email:
        taken = await db[USERS].find_one({"email": changes["email"]})
        if taken:
            raise HTTPException(status_code=400, detail="Email already registered")
    if changes:
        try:
            await db[USERS].update_one({"_id": object_id(session.user_id, "user")}, {"$set": changes})
        except PyMongoError:
            logger.exception("Error al actualizar el perfil de %s", session.user_id)
            raise HTTPException(status_code=500, detail="Error al actualizar el perfil")
    return await _read_profile(db, session)
