from datetime import timedelta

import jwt
import pytest

from app.auth import create_access_token, decode_access_token, parent_principal_from_token
from app.core.config import settings
from app.core.exceptions import ForbiddenException, UnauthorizedException
from app.principal import ParentPrincipal


class TestParentPrincipalFromToken:
    def test_valid_parent_token(self) -> None:
        token = create_access_token({"sub": 12, "role": "parent", "email": "p@example.com"})

        principal = parent_principal_from_token(token)

        assert principal == ParentPrincipal(parent_id=12, email="p@example.com")
        assert principal.id == 12

    def test_role_defaults_to_parent(self) -> None:
        assert parent_principal_from_token(create_access_token({"sub": 3})).id == 3

    def test_missing_token(self) -> None:
        with pytest.raises(UnauthorizedException) as exc_info:
            parent_principal_from_token(None)

        assert exc_info.value.code == "NOT_AUTHENTICATED"

    def test_expired_token(self) -> None:
        token = create_access_token({"sub": 12}, expires_delta=timedelta(seconds=-5))

        with pytest.raises(UnauthorizedException) as exc_info:
            parent_principal_from_token(token)

        assert exc_info.value.code == "INVALID_TOKEN"

    def test_wrong_signature(self) -> None:
        token = jwt.encode({"sub": "12"}, "not-the-secret", algorithm=settings.algorithm)

        with pytest.raises(UnauthorizedException):
            parent_principal_from_token(token)

    def test_non_numeric_subject(self) -> None:
        with pytest.raises(UnauthorizedException):
            parent_principal_from_token(create_access_token({"sub": "abc"}))

    def test_vendor_token_is_forbidden(self) -> None:
        token = create_access_token({"sub": 4, "role": "vendor"})

        with pytest.raises(ForbiddenException) as exc_info:
            parent_principal_from_token(token)

        assert exc_info.value.code == "PARENT_ROLE_REQUIRED"


def test_subject_is_stringified() -> None:
    payload = decode_access_token(create_access_token({"sub": 12}))

    assert payload["sub"] == "12"
    assert "exp" in payload
