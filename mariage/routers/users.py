# mariage/routers/users.py
# Cuenta del usuario autenticado: borrado completo (una sola transacción).

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from mariage import models, schemas
from mariage.core.security import get_current_user
from mariage.crud import users_crud
from mariage.db import get_db
from mariage.routers.auth_routes import clear_refresh_cookie

router = APIRouter(prefix="/api/users", tags=["users"])


@router.delete("/me", response_model=schemas.MessageResponse)
def delete_my_account(
    response: Response,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    users_crud.erase_account(db, current_user.id)
    clear_refresh_cookie(response)
    return {"message": "Cuenta eliminada correctamente."}
