"""HTTP tests for accounts and user profiles."""

import uuid

from jose import jwt

from app.core.config import get_settings
from tests.fixtures.fakes import bearer

V1 = get_settings().API_V1_STR

SIGN_UP = {"email": "ana@example.com", "password": "correct-horse", "name": "Ana"}


class TestAccounts:
    def test_register_then_login_then_profile(self, client):
        registered = client.post(f"{V1}/auth/register", json=SIGN_UP)
        assert registered.status_code == 201

        login = client.post(
            f"{V1}/auth/login", json={"email": "ana@example.com", "password": "correct-horse"}
        )
        assert login.status_code == 200
        token = login.json()["access_token"]

        me = client.get(f"{V1}/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["id"] == registered.json()["id"]
        assert me.json()["role"] == "user"

    def test_duplicate_registration_is_409(self, client):
        client.post(f"{V1}/auth/register", json=SIGN_UP)

        assert client.post(f"{V1}/auth/register", json=SIGN_UP).status_code == 409

    def test_short_password_is_422(self, client):
        response = client.post(f"{V1}/auth/register", json={**SIGN_UP, "password": "short"})

        assert response.status_code == 422

    def test_wrong_password_is_401(self, client):
        client.post(f"{V1}/auth/register", json=SIGN_UP)

        response = client.post(
            f"{V1}/auth/login", json={"email": "ana@example.com", "password": "wrong-horse"}
        )

        assert response.status_code == 401


class TestProfile:
    def test_first_request_provisions_profile(self, client, customer):
        me = client.get(f"{V1}/users/me", headers=customer).json()

        assert me["email"] == "buyer@example.com"
        assert me["name"] == "buyer"

    def test_rename(self, client, customer):
        response = client.patch(f"{V1}/users/me", json={"name": "Bea"}, headers=customer)

        assert response.json()["name"] == "Bea"
        assert client.get(f"{V1}/users/me", headers=customer).json()["name"] == "Bea"

    def test_guest_has_no_profile(self, client):
        assert client.get(f"{V1}/users/me").status_code == 401

    def test_token_with_non_uuid_sub_is_401(self, client):
        settings = get_settings()
        token = jwt.encode({"sub": "42", "email": "x@example.com"}, settings.JWT_SECRET)

        response = client.get(f"{V1}/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401


class TestAdmin:
    def test_promote_customer_to_admin(self, client, admin, customer):
        customer_id = client.get(f"{V1}/users/me", headers=customer).json()["id"]

        response = client.patch(
            f"{V1}/users/{customer_id}/role", json={"role": "admin"}, headers=admin
        )

        assert response.json()["role"] == "admin"
        assert client.get(f"{V1}/users", headers=customer).status_code == 200

    def test_unknown_role_is_422(self, client, admin, admin_user):
        response = client.patch(
            f"{V1}/users/{admin_user.id}/role", json={"role": "owner"}, headers=admin
        )

        assert response.status_code == 422

    def test_unknown_user_is_404(self, client, admin):
        assert client.get(f"{V1}/users/{uuid.uuid4()}", headers=admin).status_code == 404

    def test_customers_cannot_list_users(self, client, customer):
        assert client.get(f"{V1}/users", headers=customer).status_code == 403

    def test_admin_lists_users(self, client, admin, admin_user):
        emails = [u["email"] for u in client.get(f"{V1}/users", headers=admin).json()]

        assert admin_user.email in emails

    def test_bearer_helper_matches_profile(self, client, admin_user):
        me = client.get(f"{V1}/users/me", headers=bearer(admin_user.id, admin_user.email))

        assert me.json()["role"] == "admin"
