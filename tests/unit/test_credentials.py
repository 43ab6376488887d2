import pytest

from cognify.services.credentials import CredentialStore, check_credential


def test_update_and_clear_key():
    store = CredentialStore(None, "gemini-2.5-flash")
    assert not store.configured

    store.update(api_key="  abc  ", model="gemini-2.5-pro")
    assert store.api_key == "abc"
    assert store.model == "gemini-2.5-pro"

    store.update(api_key="")
    assert not store.configured
    assert store.model == "gemini-2.5-pro"


@pytest.mark.asyncio
async def test_check_valid_key(generation_client, backend):
    backend.reply("OK")
    check = await check_credential(generation_client)
    assert check.status == "valid"


@pytest.mark.asyncio
async def test_check_quota_is_a_warning(generation_client, backend):
    backend.fail(429, "Quota exceeded for quota metric", "RESOURCE_EXHAUSTED")
    check = await check_credential(generation_client)
    assert check.status == "quota_exhausted"


@pytest.mark.asyncio
async def test_check_invalid_key(generation_client, backend):
    backend.fail(400, "API key not valid.", "INVALID_ARGUMENT")
    check = await check_credential(generation_client)
    assert check.status == "invalid"
    assert check.message == "API key not valid."


@pytest.mark.asyncio
async def test_check_without_key(generation_client, credentials):
    credentials.update(api_key="")
    check = await check_credential(generation_client)
    assert check.status == "not_configured"
