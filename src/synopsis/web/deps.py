from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from synopsis.app import App
from synopsis.core.modules.token.models import AuthToken, TokenClaims
from synopsis.errors import AuthenticationError

bearer_scheme = HTTPBearer(auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_current_user(
    request: Request,
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> TokenClaims:
    """Validate the Authorization Bearer token and attach the identity to the request."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Unauthorized")

    current_user = app.authenticate(AuthToken(credentials.credentials))
    request.state.user = current_user
    return current_user


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
CurrentUserDep = Annotated[TokenClaims, Depends(get_current_user)]
