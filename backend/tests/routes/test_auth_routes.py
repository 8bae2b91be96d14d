"""Auth routes: accounts, tokens, reset links and guide invitations."""

from urllib.parse import parse_qs, urlparse

from trailblazers.services.identity_service import IdentityService

API = "/api/v1/auth"


class TestAccounts:
    def test_register_then_login(self, client):
        response = client.post(
            f"{API}/register",
            json={"name": "Robin Hood", "email": "Robin@Example.com", "password": "sherwood"},
        )
        assert response.status_code == 201
        assert response.json()["email"] == "robin@example.com"
        assert response.json()["role"] == "guest"

        login = client.post(
            f"{API}/login", json={"email": "robin@example.com", "password": "sherwood"}
        )
        assert login.status_code == 200
        body = login.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["name"] == "Robin Hood"

        me = client.get(f"{API}/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["email"] == "robin@example.com"

    def test_duplicate_email(self, client, guest):
        response = client.post(
            f"{API}/register",
            json={"name": "Again", "email": guest.email, "password": "password1"},
        )

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "EMAIL_IN_USE"

    def test_bad_credentials(self, client, guest):
        response = client.post(f"{API}/login", json={"email": guest.email, "password": "nope"})

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "INVALID_CREDENTIALS"

    def test_me_requires_token(self, client):
        assert client.get(f"{API}/me").status_code == 401

    def test_me_rejects_bad_token(self, client):
        response = client.get(f"{API}/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "INVALID_TOKEN"

    def test_password_reset(self, client, db, guest):
        link = IdentityService(db).generate_password_reset_link(guest.email)
        code = parse_qs(urlparse(link).query)["oobCode"][0]

        response = client.post(
            f"{API}/password-reset", json={"token": code, "new_password": "fresh-pass"}
        )
        assert response.status_code == 200
        assert response.json() == {"continue_url": "http://localhost:5173"}

        replay = client.post(
            f"{API}/password-reset", json={"token": code, "new_password": "fresh-pass"}
        )
        assert replay.status_code == 400


class TestGuideInvitations:
    def test_invite_and_register_guide(self, client, admin, auth_headers):
        created = client.post(
            f"{API}/guide-invitations",
            json={"name": "Gale Ridge", "email": "gale@example.com"},
            headers=auth_headers(admin),
        )
        assert created.status_code == 201
        token = created.json()["token"]
        assert created.json()["registration_url"].endswith(f"/guide-registration/{token}")

        status = client.get(f"{API}/guide-invitations/{token}")
        assert status.json() == {"valid": True, "email": "gale@example.com", "name": "Gale Ridge"}

        registered = client.post(
            f"{API}/guide-invitations/{token}/complete", json={"password": "summit-pass"}
        )
        assert registered.status_code == 201
        assert registered.json()["role"] == "guide"

        assert client.get(f"{API}/guide-invitations/{token}").json()["valid"] is False

    def test_only_admin_invites(self, client, guest, auth_headers):
        response = client.post(
            f"{API}/guide-invitations",
            json={"name": "Gale Ridge", "email": "gale@example.com"},
            headers=auth_headers(guest),
        )

        assert response.status_code == 403

    def test_unknown_token_cannot_register(self, client):
        response = client.post(
            f"{API}/guide-invitations/unknown/complete", json={"password": "summit-pass"}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_INVITATION"
