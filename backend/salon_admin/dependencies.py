from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .auth.principal import Principal
from .config import settings
from .provisioning.directory import AdminDirectoryClient
from .security.token_inspection import ExpiredTokenError, InvalidTokenError, validate_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_directory_client() -> AdminDirectoryClient:
    return AdminDirectoryClient(
        base_url=settings.admin_api_base_url,
        timeout_seconds=settings.admin_api_timeout_seconds,
    )


def get_session_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )

    token = credentials.credentials
    try:
        validate_access_token(token)
    except ExpiredTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Session has expired"
        ) from None
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from None

    return token


def get_session_directory(
    token: str = Depends(get_session_token),
    client: AdminDirectoryClient = Depends(get_directory_client),
) -> AdminDirectoryClient:
    return client.with_token(token)


async def get_current_principal(
    directory: AdminDirectoryClient = Depends(get_session_directory),
) -> Principal:
    # Loaded fresh on every request so role and permission changes apply immediately
    user = await directory.fetch_session_user()
    return Principal.from_session_user(user)
