"""
S3 Session Factory
==================

Builds an authenticated aioboto3 session for one upload.

Credential Model:
-----------------
- Base credentials come from the default botocore chain
  (environment, shared config, container/instance metadata).
- When a role ARN is configured, the session's credential provider is
  replaced with deferred assume-role credentials whose source is the
  base identity. STS is not called here: the first signed request
  triggers AssumeRole, so a bad role surfaces as an upload failure.

Validation:
-----------
Region and endpoint are checked with botocore's own validators before
anything is built, so a malformed value is a SessionError instead of
an exception deep inside client creation.

Thread Safety:
--------------
- A new session is built per call; nothing is cached at module level
- The returned S3Session is immutable

Author: Planetary AI Systems
License: MIT
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aioboto3
from aiobotocore.credentials import (
    AioAssumeRoleCredentialFetcher,
    AioDeferredRefreshableCredentials,
)
from aiobotocore.session import AioSession
from botocore.config import Config
from botocore.exceptions import BotoCoreError, InvalidRegionError
from botocore.utils import (
    is_valid_endpoint_url,
    is_valid_ipv6_endpoint_url,
    validate_region_name,
)

from s3export.core import constants as C
from s3export.core.errors import SessionError
from s3export.core.types import Result, Ok, Err
from s3export.storage.config import S3UploaderConfig

ASSUME_ROLE_METHOD: str = "assume-role"


# =============================================================================
# SESSION HANDLE
# =============================================================================

@dataclass(frozen=True)
class S3Session:
    """
    Authenticated handle to the object store.

    Attributes:
        boto_session: aioboto3 session carrying the credential provider.
        client_kwargs: Keyword arguments for `boto_session.client("s3", ...)`.
        base_credentials: Credentials resolved from the default chain, or
            None when no role is assumed (the chain is then resolved lazily
            by the client).
        credentials: Effective credentials used to sign requests. With a
            role configured these are the deferred assume-role credentials.
        role_arn: Assumed role, "" when none.
    """
    boto_session: aioboto3.Session
    client_kwargs: Dict[str, Any]
    base_credentials: Optional[Any] = None
    credentials: Optional[Any] = None
    role_arn: str = ""

    @property
    def assumes_role(self) -> bool:
        return bool(self.role_arn)

    def client(self) -> Any:
        """Async context manager yielding an S3 client."""
        return self.boto_session.client("s3", **self.client_kwargs)


# =============================================================================
# CLIENT CONFIGURATION
# =============================================================================

def session_config(config: S3UploaderConfig) -> Dict[str, Any]:
    """
    Generate S3 client kwargs from uploader configuration.

    The endpoint is only set when non-empty; otherwise botocore resolves
    the regional AWS endpoint.

    Returns:
        Dict suitable for `session.client("s3", **kwargs)`.
    """
    kwargs: Dict[str, Any] = {
        "region_name": config.region or None,
        "use_ssl": not config.disable_ssl,
        "config": Config(
            s3={"addressing_style": "path" if config.force_path_style else "auto"},
            retries={"total_max_attempts": C.TRANSPORT_MAX_ATTEMPTS},
        ),
    }

    if config.endpoint:
        kwargs["endpoint_url"] = config.endpoint

    return kwargs


def _validate(config: S3UploaderConfig) -> Result[None, SessionError]:
    if config.region:
        try:
            validate_region_name(config.region)
        except InvalidRegionError as e:
            return Err(SessionError.invalid_region(config.region, cause=e))

    endpoint = config.endpoint
    if endpoint and not (
        is_valid_endpoint_url(endpoint) or is_valid_ipv6_endpoint_url(endpoint)
    ):
        return Err(SessionError.invalid_endpoint(endpoint))

    return Ok(None)


def assume_role_credentials(
    botocore_session: AioSession,
    source_credentials: Any,
    role_arn: str,
    region: Optional[str] = None,
) -> AioDeferredRefreshableCredentials:
    """
    Layer assume-role credentials over a source identity.

    Nothing is fetched until the credentials are first used for signing.
    """
    client_creator = functools.partial(
        botocore_session.create_client,
        region_name=region or None,
    )
    fetcher = AioAssumeRoleCredentialFetcher(
        client_creator=client_creator,
        source_credentials=source_credentials,
        role_arn=role_arn,
    )
    return AioDeferredRefreshableCredentials(
        refresh_using=fetcher.fetch_credentials,
        method=ASSUME_ROLE_METHOD,
    )


# =============================================================================
# FACTORY
# =============================================================================

async def create_session(config: S3UploaderConfig) -> Result[S3Session, SessionError]:
    """
    Build an authenticated session for the configured bucket.

    Args:
        config: Uploader configuration.

    Returns:
        Ok(S3Session) on success.
        Err(SessionError) if region/endpoint are malformed or botocore
        cannot build the session.
    """
    validation = _validate(config)
    if validation.is_err():
        return validation

    try:
        botocore_session = AioSession()
        base_credentials = None
        credentials = None

        if config.role_arn:
            base_credentials = await botocore_session.get_credentials()
            credentials = assume_role_credentials(
                botocore_session,
                base_credentials,
                config.role_arn,
                region=config.region,
            )
            # Clients created from this session sign with the role
            botocore_session._credentials = credentials

        boto_session = aioboto3.Session(botocore_session=botocore_session)

    except (BotoCoreError, ValueError) as e:
        return Err(SessionError.construction_failed("session", cause=e))

    return Ok(S3Session(
        boto_session=boto_session,
        client_kwargs=session_config(config),
        base_credentials=base_credentials,
        credentials=credentials,
        role_arn=config.role_arn,
    ))
