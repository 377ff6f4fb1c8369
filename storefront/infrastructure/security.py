import logging
from typing import Optional
from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storefront.config import settings

logger = logging.getLogger(__name__)


class TokenClaims(BaseModel):
    """Содержимое токена сессии, выданного сервисом авторизации"""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    phone: str = ""
    is_admin: bool = Field(False, alias="isAdmin")


def decode_token(token: str) -> Optional[TokenClaims]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return TokenClaims.model_validate(payload)
    except (JWTError, ValidationError) as e:
        logger.warning(f"Отклонён токен: {e}")
        return None
