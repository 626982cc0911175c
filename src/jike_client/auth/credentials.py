"""Credential values and their multi-source resolution.

`Credentials` is the access/refresh token pair a client starts with.
`CredentialResolver` finds those tokens (and other settings) with priority
ordering:

1. Explicitly provided value
2. Environment variable
3. .env file (python-dotenv)
4. Token file (`JIKE_TOKEN_FILE`, JSON with `access_token` / `refresh_token`)
5. Default value

Example:
    ```python
    from jike_client.auth import CredentialResolver

    resolver = CredentialResolver()
    credentials = resolver.resolve_credentials()
    client = JikeClient(refresh_token=credentials.refresh_token)
    ```

Security Considerations:
    - Credentials are never logged in full (masked with ***)
    - Only source information is logged (env var name, file path, etc.)
    - Thread-safe dotenv loading with lock
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from threading import Lock

from dotenv import load_dotenv

from jike_client.auth.exceptions import CredentialFileError, CredentialNotFoundError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_ENV = "JIKE_ACCESS_TOKEN"
REFRESH_TOKEN_ENV = "JIKE_REFRESH_TOKEN"
TOKEN_FILE_ENV = "JIKE_TOKEN_FILE"


@dataclass(frozen=True)
class Credentials:
    """Access/refresh token pair.

    An empty `refresh_token` means the client is unauthenticated.
    """

    access_token: str = ""
    refresh_token: str = ""

    @property
    def is_authenticated(self) -> bool:
        return bool(self.refresh_token)

    def __repr__(self) -> str:
        access = "***" if self.access_token else ""
        refresh = "***" if self.refresh_token else ""
        return f"Credentials(access_token={access!r}, refresh_token={refresh!r})"


class CredentialResolver:
    """Resolve settings and tokens from explicit values, env, .env and token files.

    Attributes:
        _dotenv_loaded: Whether .env file has been loaded.
        _dotenv_lock: Thread lock for safe dotenv loading.
    """

    def __init__(self, dotenv_path: str | None = None, load_dotenv: bool = True):
        """Initialize credential resolver.

        Args:
            dotenv_path: Path to .env file. If None, python-dotenv searches
                parent directories.
            load_dotenv: Whether to load the .env file at all.
        """
        self._dotenv_loaded = False
        self._dotenv_lock = Lock()
        self._dotenv_path = dotenv_path

        if load_dotenv:
            self._ensure_dotenv_loaded()

    def _ensure_dotenv_loaded(self) -> None:
        if self._dotenv_loaded:
            return

        with self._dotenv_lock:
            if self._dotenv_loaded:
                return
            load_dotenv(dotenv_path=self._dotenv_path)
            self._dotenv_loaded = True
            logger.debug("Loaded .env file for credential resolution")

    def resolve(
        self,
        *,
        value: str | None = None,
        env_var_name: str | None = None,
        default: str | None = None,
        required: bool = False,
        mask_in_logs: bool = True,
    ) -> str | None:
        """Resolve one setting; first match wins.

        Args:
            value: Explicitly provided value (highest priority).
            env_var_name: Environment variable to check (includes values
                loaded from .env).
            default: Value used when nothing else is set.
            required: Raise instead of returning None when unresolved.
            mask_in_logs: Mask the value in debug logs.

        Raises:
            CredentialNotFoundError: If required=True and nothing was found.
        """
        result = None
        source = None

        if value is not None:
            result, source = value, "explicit parameter"
        elif env_var_name and env_var_name in os.environ:
            result, source = os.environ[env_var_name], f"environment variable '{env_var_name}'"
        elif default is not None:
            result, source = default, "default value"

        if result is not None:
            shown = "***" if mask_in_logs else result
            logger.debug(f"Resolved {env_var_name or 'setting'} from {source}: {shown}")

        if required and result is None:
            error_msg = "Required credential not found"
            if env_var_name:
                error_msg += f" (checked env var: {env_var_name})"
            raise CredentialNotFoundError(error_msg, env_var_name=env_var_name)

        return result

    def read_token_file(self, file_path: str | Path) -> Credentials:
        """Read a JSON token file with `access_token` and `refresh_token` keys.

        Supports `~` and `$VAR` expansion in the path.

        Raises:
            CredentialFileError: If the file is missing, unreadable or malformed.
        """
        path_obj = Path(os.path.expanduser(os.path.expandvars(str(file_path))))

        try:
            payload = json.loads(path_obj.read_text())
        except FileNotFoundError:
            raise CredentialFileError(f"Token file not found: {path_obj}") from None
        except PermissionError:
            raise CredentialFileError(f"Permission denied reading token file: {path_obj}") from None
        except ValueError as e:
            raise CredentialFileError(f"Token file {path_obj} is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise CredentialFileError(f"Token file {path_obj} must contain a JSON object")

        logger.debug(f"Resolved credentials from file: {path_obj} (***)")
        return Credentials(
            access_token=str(payload.get("access_token") or ""),
            refresh_token=str(payload.get("refresh_token") or ""),
        )

    def resolve_credentials(
        self,
        *,
        access_token: str | None = None,
        refresh_token: str | None = None,
        required: bool = False,
    ) -> Credentials:
        """Resolve the token pair.

        Explicit arguments win, then `JIKE_ACCESS_TOKEN` / `JIKE_REFRESH_TOKEN`,
        then the token file named by `JIKE_TOKEN_FILE`. Missing tokens resolve
        to empty strings.

        Args:
            access_token: Explicit access token.
            refresh_token: Explicit refresh token.
            required: Raise when no refresh token can be found.

        Raises:
            CredentialNotFoundError: If required=True and no refresh token exists.
            CredentialFileError: If `JIKE_TOKEN_FILE` points to an unusable file.
        """
        access = self.resolve(value=access_token, env_var_name=ACCESS_TOKEN_ENV)
        refresh = self.resolve(value=refresh_token, env_var_name=REFRESH_TOKEN_ENV)

        if access is None or refresh is None:
            token_file = self.resolve(env_var_name=TOKEN_FILE_ENV, mask_in_logs=False)
            if token_file:
                from_file = self.read_token_file(token_file)
                access = access if access is not None else from_file.access_token
                refresh = refresh if refresh is not None else from_file.refresh_token

        credentials = Credentials(access_token=access or "", refresh_token=refresh or "")
        if required and not credentials.is_authenticated:
            raise CredentialNotFoundError(
                f"Refresh token not found (checked env vars: {REFRESH_TOKEN_ENV}, {TOKEN_FILE_ENV})",
                env_var_name=REFRESH_TOKEN_ENV,
            )
        return credentials
