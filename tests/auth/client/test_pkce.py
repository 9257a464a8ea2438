import base64
import hashlib
from unittest.mock import patch

import pytest

from authflow.auth.models.errors import PKCEError
from authflow.auth.primitives.pkce import (
    PKCEManager,
    derive_challenge,
    random_string,
)


class TestRandomString:
    def test_state_token_length_and_alphabet(self) -> None:
        # Act
        token = random_string(45)

        # Assert
        assert len(token) == 60
        assert "=" not in token
        assert set(token) <= set(
            "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
        )

    def test_uniqueness(self) -> None:
        assert random_string(32) != random_string(32)

    def test_rejects_non_positive_length(self) -> None:
        with pytest.raises(ValueError):
            random_string(0)

    def test_entropy_failure_is_fatal(self) -> None:
        # Arrange
        with patch(
            "authflow.auth.primitives.pkce.secrets.token_bytes",
            side_effect=OSError("no entropy"),
        ):
            # Act & Assert
            with pytest.raises(PKCEError, match="Entropy source unavailable"):
                random_string(16)


class TestDeriveChallenge:
    def test_rfc7636_appendix_b_vector(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"

        assert derive_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_deterministic(self) -> None:
        assert derive_challenge("same-verifier") == derive_challenge("same-verifier")


class TestPKCEManager:
    def test_generate_parameters_crypto_requirements(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act
        params = pkce_manager.generate_parameters()

        # Assert RFC 7636 requirements
        assert 43 <= len(params.code_verifier) <= 128
        assert 43 <= len(params.code_challenge) <= 128
        assert params.code_challenge_method == "S256"

        # Verify code_challenge is base64url(sha256(code_verifier))
        expected_challenge = (
            base64.urlsafe_b64encode(
                hashlib.sha256(params.code_verifier.encode("ascii")).digest()
            )
            .decode("ascii")
            .rstrip("=")
        )
        assert params.code_challenge == expected_challenge

    def test_generate_parameters_uniqueness(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act - Generate multiple parameters
        params1 = pkce_manager.generate_parameters()
        params2 = pkce_manager.generate_parameters()

        # Assert - Each generation is unique
        assert params1.code_verifier != params2.code_verifier
        assert params1.code_challenge != params2.code_challenge

    def test_verifier_too_short_raises_pkce_error(self) -> None:
        # 16 bytes encode to 22 characters, below the RFC minimum
        with pytest.raises(PKCEError):
            PKCEManager(verifier_bytes=16).generate_parameters()
