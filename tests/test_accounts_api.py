from models import Account
from tests.conftest import PASSWORD


def _register(client, role="donor", email="new@example.com", password="secret123"):
    return client.post(
        "/accounts",
        json={"name": "New User", "email": email, "password": password, "role": role},
    )


class TestRegistration:
    def test_register_returns_token_and_pending_account(self, client):
        response = _register(client, email="New@Example.com")
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["token"]
        assert body["user"]["email"] == "new@example.com"
        assert body["user"]["role"] == "donor"
        assert body["user"]["status"] == "pending"
        assert "password_hash" not in body["user"]

        me = client.get("/accounts/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200
        assert me.json()["user"]["id"] == body["user"]["id"]

    def test_duplicate_email(self, client):
        _register(client)
        response = _register(client)
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Email already registered"}

    def test_admin_cannot_self_register(self, client):
        response = _register(client, role="admin")
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_short_password(self, client):
        response = _register(client, password="123")
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"


class TestLogin:
    def test_login(self, client, make_account, fetch):
        account = make_account(role="volunteer", email="vol@example.com", full_name="Vee")
        response = client.post("/login", json={"email": "vol@example.com", "password": PASSWORD})
        assert response.status_code == 200
        body = response.json()
        assert body["token"]
        assert body["user"]["full_name"] == "Vee"
        assert fetch(Account, account.id).last_login is not None

    def test_bad_credentials(self, client, make_account):
        make_account(email="donor@example.com")
        wrong = client.post("/login", json={"email": "donor@example.com", "password": "nope-nope"})
        unknown = client.post("/login", json={"email": "ghost@example.com", "password": PASSWORD})
        for response in (wrong, unknown):
            assert response.status_code == 401
            assert response.json()["message"] == "Invalid email or password"

    def test_missing_or_bad_token(self, client):
        assert client.get("/accounts/me").status_code == 401
        response = client.get("/accounts/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_logout(self, client, make_account, auth_headers):
        account = make_account()
        response = client.post("/logout", headers=auth_headers(account))
        assert response.json() == {"success": True, "message": "Logged out successfully"}


class TestProfileCompletion:
    def test_school_profile_with_documents(self, client, make_account, app):
        make_account(role="school", status="pending", email="school@example.com")
        response = client.post(
            "/accounts/school-profile",
            data={
                "email": "school@example.com",
                "password": PASSWORD,
                "school_name": "Hill Top",
                "school_type": "National",
            },
            files={"registration_proof": ("proof.pdf", b"%PDF", "application/pdf")},
        )
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["school_name"] == "Hill Top"
        assert user["organization_name"] == "Hill Top"
        assert user["registration_proof"].startswith("school/registration_proof-")
        assert app.state.storage.path_for(user["registration_proof"]).exists()

        served = client.get(f"/uploads/{user['registration_proof']}")
        assert served.status_code == 200
        assert served.content == b"%PDF"

    def test_registration_token_completes_profile(self, client):
        registered = client.post(
            "/accounts",
            json={"name": "Vee", "email": "vee@example.com", "password": PASSWORD, "role": "volunteer"},
        ).json()
        response = client.post(
            "/accounts/volunteer-profile",
            json={"full_name": "Vee Perera", "vehicle_type": "van"},
            headers={"Authorization": f"Bearer {registered['token']}"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["vehicle_type"] == "van"

    def test_rejected_account_resubmission_resets_status(self, client, make_account, auth_headers, fetch):
        account = make_account(
            role="donor", status="rejected", email="d@example.com", rejection_reason="No ID"
        )
        response = client.post(
            "/accounts/donor-profile",
            json={"organization_name": "Rotary", "organization_type": "NGO"},
            headers=auth_headers(account),
        )
        assert response.status_code == 200
        assert response.json()["user"]["status"] == "pending"
        stored = fetch(Account, account.id)
        assert stored.status == "pending"
        assert stored.rejection_reason is None
        assert stored.organization_name == "Rotary"

    def test_anonymous_cannot_take_over_account(self, client, make_account, fetch):
        victim = make_account(role="donor", email="victim@example.com", organization_name="Real")
        response = client.post(
            "/accounts/donor-profile",
            json={"email": "victim@example.com", "organization_name": "Hijacked", "name": "Evil"},
        )
        assert response.status_code == 401
        assert "token" not in response.json()
        stored = fetch(Account, victim.id)
        assert stored.organization_name == "Real"
        assert stored.name == victim.name
        assert stored.status == "verified"

    def test_wrong_password_is_rejected(self, client, make_account, fetch):
        victim = make_account(role="donor", email="victim2@example.com", organization_name="Real")
        response = client.post(
            "/accounts/donor-profile",
            json={"email": "victim2@example.com", "password": "guessing", "organization_name": "X"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"
        assert fetch(Account, victim.id).organization_name == "Real"

    def test_non_string_email(self, client):
        response = client.post(
            "/accounts/donor-profile", json={"email": 123, "password": PASSWORD}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"

    def test_role_mismatch(self, client, make_account):
        make_account(role="volunteer", email="v@example.com")
        response = client.post(
            "/accounts/donor-profile",
            json={"email": "v@example.com", "password": PASSWORD, "organization_name": "X"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid role for this profile"

    def test_unknown_email(self, client):
        response = client.post(
            "/accounts/volunteer-profile",
            json={"email": "nobody@example.com", "password": PASSWORD},
        )
        assert response.status_code == 401

    def test_admin_completes_named_profile(self, client, admin, auth_headers, make_account, fetch):
        account = make_account(role="volunteer", email="helped@example.com")
        headers = auth_headers(admin)
        response = client.post(
            "/accounts/volunteer-profile",
            json={"email": "helped@example.com", "skills": "driving"},
            headers=headers,
        )
        assert response.status_code == 200
        assert fetch(Account, account.id).skills == "driving"

        missing = client.post(
            "/accounts/volunteer-profile", json={"email": "nobody@example.com"}, headers=headers
        )
        assert missing.status_code == 404

    def test_invalid_choice(self, client, make_account):
        make_account(role="volunteer", email="v2@example.com")
        response = client.post(
            "/accounts/volunteer-profile",
            json={"email": "v2@example.com", "password": PASSWORD, "vehicle_type": "plane"},
        )
        assert response.status_code == 400

    def test_cannot_complete_someone_elses_profile(self, client, make_account, auth_headers, fetch):
        target = make_account(role="school", email="target@example.com", school_name="Real")
        intruder = make_account(role="school")
        response = client.post(
            "/accounts/school-profile",
            json={"email": "target@example.com", "school_name": "Fake"},
            headers=auth_headers(intruder),
        )
        assert response.status_code == 403
        assert fetch(Account, target.id).school_name == "Real"


class TestSelfService:
    def test_update_profile_ignores_role(self, client, make_account, auth_headers, fetch):
        account = make_account(role="volunteer")
        response = client.put(
            "/accounts/me",
            json={"skills": "first aid", "role": "admin"},
            headers=auth_headers(account),
        )
        assert response.status_code == 200
        stored = fetch(Account, account.id)
        assert stored.role == "volunteer"
        assert stored.skills == "first aid"

    def test_change_password(self, client, make_account, auth_headers):
        account = make_account(email="pw@example.com")
        headers = auth_headers(account)

        wrong = client.put(
            "/accounts/me/password",
            json={"current_password": "wrong-pass", "new_password": "brand-new"},
            headers=headers,
        )
        assert wrong.status_code == 401

        ok = client.put(
            "/accounts/me/password",
            json={"current_password": PASSWORD, "new_password": "brand-new"},
            headers=headers,
        )
        assert ok.status_code == 200
        login = client.post("/login", json={"email": "pw@example.com", "password": "brand-new"})
        assert login.status_code == 200

    def test_view_own_account_only(self, client, make_account, auth_headers, admin):
        account = make_account()
        other = make_account()
        own = client.get(f"/accounts/{account.id}", headers=auth_headers(account))
        assert own.status_code == 200
        assert "password_hash" not in own.json()["user"]
        assert client.get(f"/accounts/{other.id}", headers=auth_headers(account)).status_code == 403
        assert client.get(f"/accounts/{other.id}", headers=auth_headers(admin)).status_code == 200

    def test_public_volunteer_listing(self, client, make_account):
        shown = make_account(role="volunteer", status="verified", full_name="Shown")
        make_account(role="volunteer", status="pending")
        make_account(role="donor", status="verified")
        body = client.get("/accounts/volunteers").json()
        assert body["count"] == 1
        assert body["volunteers"][0]["id"] == shown.id
        assert "status" not in body["volunteers"][0]


class TestAdminReview:
    def test_pending_and_all(self, client, admin, auth_headers, make_account):
        pending = make_account(role="school", status="pending")
        make_account(role="donor", status="verified")
        headers = auth_headers(admin)

        waiting = client.get("/accounts/admin/pending", headers=headers).json()
        assert [u["id"] for u in waiting["users"]] == [pending.id]

        everyone = client.get("/accounts/admin/all", headers=headers).json()
        assert everyone["count"] == 2
        assert all(u["role"] != "admin" for u in everyone["users"])

    def test_non_admin_is_forbidden(self, client, make_account, auth_headers):
        donor = make_account()
        target = make_account(status="pending")
        assert client.get("/accounts/admin/all", headers=auth_headers(donor)).status_code == 403
        response = client.put(f"/accounts/{target.id}/approve", headers=auth_headers(donor))
        assert response.status_code == 403

    def test_reject_then_approve(self, client, admin, auth_headers, make_account):
        target = make_account(role="school", status="pending")
        headers = auth_headers(admin)

        missing = client.put(f"/accounts/{target.id}/reject", json={}, headers=headers)
        assert missing.status_code == 400
        assert missing.json()["message"] == "Rejection reason is required"

        rejected = client.put(
            f"/accounts/{target.id}/reject", json={"reason": "Blurry letter"}, headers=headers
        ).json()["user"]
        assert rejected["status"] == "rejected"
        assert rejected["rejection_reason"] == "Blurry letter"

        approved = client.put(f"/accounts/approve/{target.id}", headers=headers).json()["user"]
        assert approved["status"] == "verified"
        assert approved["rejection_reason"] is None

    def test_delete(self, client, admin, auth_headers, make_account, fetch):
        first = make_account()
        second = make_account()
        headers = auth_headers(admin)
        assert client.delete(f"/accounts/{first.id}", headers=headers).status_code == 200
        assert client.put(f"/accounts/{second.id}/delete", headers=headers).status_code == 200
        assert fetch(Account, first.id) is None
        assert fetch(Account, second.id) is None
        assert client.delete(f"/accounts/{first.id}", headers=headers).status_code == 404

    def test_deleted_account_token_stops_working(self, client, admin, auth_headers, make_account):
        account = make_account()
        headers = auth_headers(account)
        client.delete(f"/accounts/{account.id}", headers=auth_headers(admin))
        assert client.get("/accounts/me", headers=headers).status_code == 401
