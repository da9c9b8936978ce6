# backend/app/api/dependencies/auth.py
"""
Authentication dependencies.

The authenticated parent is resolved once per request and handed to the
route as a typed ``ParentPrincipal``; nothing downstream reads identity out
of the request.
"""

import logging
from typing import Optional

from fastapi import Depends

from ...auth import oauth2_scheme, parent_principal_from_token
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...principal import ParentPrincipal

logger = logging.getLogger(__name__)


async def get_current_parent(token: Optional[str] = Depends(oauth2_scheme)) -> ParentPrincipal:
    """Require a bearer token for a parent account."""
    try:
        return parent_principal_from_token(token)
    except DomainException as e:
        handle_domain_exception(e)
        raise  # unreachable; handle_domain_exception always raises
