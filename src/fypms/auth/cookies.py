"""Auth cookie policy.

Both tokens travel as HTTP-only cookies so frontend JavaScript can't read
them. In production the frontend lives on another origin, so the cookies
are SameSite=None, which browsers only accept together with Secure.
Outside production there is no TLS, so the cookies are neither Secure
nor SameSite=None (browsers would drop them); they fall back to Lax,
which covers a same-site dev frontend such as localhost:5173.
"""

from fastapi import Response

from fypms.config import settings

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def cookie_options() -> dict:
    secure = settings.is_production
    return {
        "httponly": True,
        "secure": secure,
        "samesite": "none" if secure else "lax",
        "path": "/",
    }


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    opts = cookie_options()
    response.set_cookie(ACCESS_COOKIE, access_token, **opts)
    response.set_cookie(REFRESH_COOKIE, refresh_token, **opts)


def clear_auth_cookies(response: Response) -> None:
    opts = cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **opts)
    response.delete_cookie(REFRESH_COOKIE, **opts)
