from datetime import timedelta

import pytest

from courier_hub.core.auth.identity import SharedSecretIdentityProvider
from courier_hub.core.errors import Unauthenticated


@pytest.fixture
def provider():
    return SharedSecretIdentityProvider(secret_key="test-secret")


def test_round_trip_yields_lowercased_email(provider):
    token = provider.create_token("Person@Example.com", uid="abc123")

    identity = provider.verify(token)

    assert identity.email == "person@example.com"
    assert identity.uid == "abc123"


def test_token_signed_with_another_key_is_rejected(provider):
    token = SharedSecretIdentityProvider(secret_key="other-secret").create_token("a@example.com")
    with pytest.raises(Unauthenticated):
        provider.verify(token)


def test_expired_token_is_rejected(provider):
    token = provider.create_token("a@example.com", expires_in=timedelta(seconds=-10))
    with pytest.raises(Unauthenticated):
        provider.verify(token)


def test_garbage_is_rejected(provider):
    with pytest.raises(Unauthenticated):
        provider.verify("not.a.jwt")


def test_delete_account_without_admin_endpoint_is_a_no_op(provider):
    provider.delete_account("uid-1", "a@example.com")


def test_health_needs_no_auth(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
