from fastapi import Depends, HTTPException, Request, status

from storefront.infrastructure.security import TokenClaims, decode_token


def get_current_claims(request: Request) -> TokenClaims:
    """Пользователь из заголовка Authorization: Bearer <token>"""
    header = request.headers.get("Authorization", "")
    token = header[7:] if header.startswith("Bearer ") else None
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="NO_TOKEN")

    claims = decode_token(token)
    if claims is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="BAD_TOKEN")
    return claims


def require_admin(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
    if not claims.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden")
    return claims
