"""Tests for the credential probe."""

import asyncio

import pytest
from botocore.exceptions import ProfileNotFound

from infrascope.core.exceptions import ClientConnectionException, ProviderError
from infrascope.models.resolution import AuthResult, AuthStatus
from infrascope.resolution.auth_probe import AuthProbe


class TestAuthProbe:
    """Tests for AuthProbe."""

    @pytest.mark.asyncio
    async def test_authenticated(self, context, gateway):
        result = await AuthProbe(context).probe("us-east-1")

        assert result.authenticated
        assert result.account == "123456789012"
        gateway.check_auth.assert_awaited_once_with("us-east-1")
        gateway.clear_credential_cache.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unauthenticated(self, context, gateway):
        gateway.check_auth.return_value = AuthResult.unauthenticated("ExpiredToken")

        result = await AuthProbe(context).probe("us-east-1")

        assert result.status == AuthStatus.UNAUTHENTICATED
        assert result.reason == "ExpiredToken"

    @pytest.mark.asyncio
    async def test_clears_cache_before_probe_on_retry(self, context, gateway):
        calls = []
        gateway.clear_credential_cache.side_effect = lambda: calls.append("clear")
        gateway.check_auth.side_effect = lambda region: calls.append("check") or AuthResult.ok()

        await AuthProbe(context).probe("us-east-1", clear_credentials=True)

        assert calls == ["clear", "check"]
        assert context.credentials.invalidations == 1

    @pytest.mark.asyncio
    async def test_clears_cache_when_configured(self, context, gateway):
        context.settings.clear_credentials_on_refresh = True

        await AuthProbe(context).probe("us-east-1")

        gateway.clear_credential_cache.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_credential_provider_error_is_unauthenticated(self, context, gateway):
        gateway.check_auth.side_effect = ProviderError(
            "GetCallerIdentity", "The security token included in the request is expired"
        )

        result = await AuthProbe(context).probe("us-east-1")

        assert result.status == AuthStatus.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_other_provider_error_is_probe_error(self, context, gateway):
        gateway.check_auth.side_effect = ProviderError("GetCallerIdentity", "Could not connect to the endpoint URL")

        result = await AuthProbe(context).probe("us-east-1")

        assert result.status == AuthStatus.PROBE_ERROR
        assert "endpoint" in result.reason

    @pytest.mark.asyncio
    async def test_timeout_is_probe_error(self, context, gateway):
        context.settings.stage_timeout_seconds = 0.01

        async def slow(region):
            await asyncio.sleep(1)

        gateway.check_auth.side_effect = slow

        result = await AuthProbe(context).probe("us-east-1")

        assert result.status == AuthStatus.PROBE_ERROR
        assert "timed out" in result.reason

    @pytest.mark.asyncio
    async def test_missing_profile_is_unauthenticated(self, context, gateway):
        error = ClientConnectionException("AWS", "Failed to create session: profile not found")
        error.__cause__ = ProfileNotFound(profile="missing")
        gateway.check_auth.side_effect = error

        result = await AuthProbe(context).probe("us-east-1")

        assert result.status == AuthStatus.UNAUTHENTICATED
        assert "Failed to create session" in result.reason

    @pytest.mark.asyncio
    async def test_session_failure_is_probe_error(self, context, gateway):
        gateway.check_auth.side_effect = ClientConnectionException("AWS", "Failed to create session: bad region")

        result = await AuthProbe(context).probe("us-east-1")

        assert result.status == AuthStatus.PROBE_ERROR
        assert result.reason == "AWS connection failed: Failed to create session: bad region"
