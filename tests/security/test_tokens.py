"""Tests for bearer token verification"""
import base64
import json
import time

import jwt
import pytest

from app.core.config import MissingSecretError, config
from app.security.tokens import (
    AlgorithmMismatchError,
    MalformedTokenError,
    SignatureMismatchError,
    TokenExpiredError,
    TokenNotYetValidError,
    TokenVerificationError,
    verify_token,
)

TEST_SECRET = config.jwt_secret


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def forge(header: dict, payload: dict, signature: str = "c2ln") -> str:
    """Token with an arbitrary header and a signature that proves nothing"""
    return f"{_b64(header)}.{_b64(payload)}.{signature}"


class TestVerifyTokenSuccess:

    def test_returns_roles_and_registered_claims(self, make_token):
        token = make_token(roles=("admin", "editor"))

        claims = verify_token(token, TEST_SECRET)

        assert claims.roles == frozenset({"admin", "editor"})
        assert claims.subject == "user-123"
        assert claims.expires_at is not None
        assert claims.issued_at is not None
        assert claims.has_role("admin")

    def test_missing_roles_claim_is_empty_set(self, make_token):
        claims = verify_token(make_token(roles=None), TEST_SECRET)
        assert claims.roles == frozenset()
        assert not claims.has_role("admin")

    def test_role_match_is_exact(self, make_token):
        claims = verify_token(make_token(roles=("Admin",)), TEST_SECRET)
        assert not claims.has_role("admin")

    def test_token_without_expiry_is_accepted(self):
        token = jwt.encode({"sub": "svc", "roles": ["admin"]}, TEST_SECRET, algorithm="HS256")
        claims = verify_token(token, TEST_SECRET)
        assert claims.expires_at is None


class TestVerifyTokenFailures:

    def test_missing_secret_is_configuration_fault(self, make_token):
        with pytest.raises(MissingSecretError):
            verify_token(make_token(), "")
        with pytest.raises(MissingSecretError):
            verify_token(make_token(), None)

    def test_missing_secret_is_not_a_verification_failure(self):
        assert not issubclass(MissingSecretError, TokenVerificationError)

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "not.a.token", "...."])
    def test_malformed(self, token):
        with pytest.raises(MalformedTokenError):
            verify_token(token, TEST_SECRET)

    def test_wrong_secret(self, make_token):
        token = make_token(secret="another-secret-key-that-is-long-enough!!")
        with pytest.raises(SignatureMismatchError):
            verify_token(token, TEST_SECRET)

    def test_tampered_payload(self, make_token):
        header, _, signature = make_token(roles=("customer",)).split(".")
        tampered = f"{header}.{_b64({'sub': 'user-123', 'roles': ['admin']})}.{signature}"

        with pytest.raises(SignatureMismatchError):
            verify_token(tampered, TEST_SECRET)

    def test_other_hmac_algorithm_rejected(self, make_token):
        token = make_token(algorithm="HS512")
        with pytest.raises(AlgorithmMismatchError):
            verify_token(token, TEST_SECRET)

    def test_asymmetric_algorithm_rejected_before_signature_check(self):
        token = forge({"alg": "RS256", "typ": "JWT"}, {"sub": "x", "roles": ["admin"]})
        with pytest.raises(AlgorithmMismatchError):
            verify_token(token, TEST_SECRET)

    def test_none_algorithm_rejected(self):
        token = forge({"alg": "none", "typ": "JWT"}, {"sub": "x", "roles": ["admin"]}, signature="")
        with pytest.raises(AlgorithmMismatchError):
            verify_token(token, TEST_SECRET)

    def test_expired(self, make_token):
        with pytest.raises(TokenExpiredError):
            verify_token(make_token(expires_in=-60), TEST_SECRET)

    def test_expired_within_leeway_is_accepted(self, make_token):
        claims = verify_token(make_token(expires_in=-5), TEST_SECRET, leeway=30)
        assert claims.has_role("admin")

    def test_not_yet_valid(self, make_token):
        token = make_token(nbf=int(time.time()) + 3600)
        with pytest.raises(TokenNotYetValidError):
            verify_token(token, TEST_SECRET)

    @pytest.mark.parametrize("roles", ["admin", {"admin": True}, [1, 2]])
    def test_roles_must_be_list_of_strings(self, roles):
        token = jwt.encode({"sub": "x", "roles": roles}, TEST_SECRET, algorithm="HS256")
        with pytest.raises(MalformedTokenError):
            verify_token(token, TEST_SECRET)

    def test_failures_share_base_class(self):
        for error in (
            MalformedTokenError,
            AlgorithmMismatchError,
            SignatureMismatchError,
            TokenExpiredError,
            TokenNotYetValidError,
        ):
            assert issubclass(error, TokenVerificationError)

    def test_failure_kinds_are_distinct(self):
        kinds = {
            MalformedTokenError.kind,
            AlgorithmMismatchError.kind,
            SignatureMismatchError.kind,
            TokenExpiredError.kind,
            TokenNotYetValidError.kind,
        }
        assert len(kinds) == 5
