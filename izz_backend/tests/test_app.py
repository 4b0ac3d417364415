import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from izz_backend.app import create_app
from izz_backend.config import Settings
from izz_backend.dependencies import get_identity_client
from izz_backend.identity import IdentityClient
from izz_backend.providers import InMemoryIdentityProvider
from izz_backend.store import InMemoryDocumentStore


def _settings(**overrides) -> Settings:
    values = {"use_in_memory_backends": True, "uploads_dir": "does-not-exist"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.provider = InMemoryIdentityProvider()
        self.store = InMemoryDocumentStore()
        self.identity = IdentityClient(self.provider, self.store)
        app = create_app(_settings())
        app.dependency_overrides[get_identity_client] = lambda: self.identity
        self.client = TestClient(app)

    def _register(self, email="a@x.com", password="secret123", **extra):
        return self.client.post(
            "/auth/register", json={"email": email, "password": password, **extra}
        )

    def test_root_message(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Hello, from izz"})

    def test_unknown_route_returns_uniform_404(self):
        for method, path in [("get", "/nope"), ("post", "/api/unknown/path")]:
            response = getattr(self.client, method)(path)
            self.assertEqual(response.status_code, 404)
            self.assertEqual(response.json(), {"message": "Route not found"})

    def test_method_mismatch_returns_uniform_404(self):
        for method, path in [
            ("post", "/"),
            ("get", "/auth/register"),
            ("put", "/api/task/u1"),
        ]:
            response = getattr(self.client, method)(path)
            self.assertEqual(response.status_code, 404, f"{method.upper()} {path}")
            self.assertEqual(response.json(), {"message": "Route not found"})

    def test_register_provisions_profile(self):
        response = self._register(display_name="Ada")
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["user"]["email"], "a@x.com")
        self.assertEqual(payload["uid"], payload["user"]["uid"])

        profile = self.client.get(f"/api/data/profile/{payload['uid']}")
        self.assertEqual(profile.status_code, 200)
        self.assertEqual(profile.json()["profile"]["email"], "a@x.com")
        self.assertEqual(profile.json()["profile"]["displayName"], "Ada")
        self.assertIn("createdAt", profile.json()["profile"])

    def test_register_requires_credentials(self):
        response = self.client.post("/auth/register", json={"email": "a@x.com"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Email and password are required"})
        self.assertEqual(self.provider.accounts, {})

    def test_register_duplicate_email(self):
        self._register()
        response = self._register()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "EMAIL_EXISTS"})

    def test_login_keeps_existing_profile(self):
        uid = self._register(profile={"role": "admin"}).json()["uid"]
        response = self.client.post(
            "/auth/login", json={"email": "a@x.com", "password": "secret123"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["uid"], uid)
        self.assertTrue(response.json()["id_token"])
        self.assertEqual(len(self.store.list("users")), 1)
        self.assertEqual(self.identity.get_user_document(uid)["role"], "admin")

    def test_login_with_bad_password(self):
        self._register()
        response = self.client.post(
            "/auth/login", json={"email": "a@x.com", "password": "nope-nope"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "INVALID_LOGIN_CREDENTIALS")

    def test_password_reset(self):
        self._register()
        response = self.client.post("/auth/reset-password", json={"email": "a@x.com"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"message": "Check your email for the password reset link."},
        )

        response = self.client.post(
            "/auth/reset-password", json={"email": "ghost@x.com"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(), {"message": "Password reset failed: EMAIL_NOT_FOUND"}
        )

    def test_google_sign_in_flow(self):
        start = self.client.get("/auth/google")
        self.assertEqual(start.status_code, 200)
        self.assertIn("prompt=select_account", start.json()["auth_uri"])

        response = self.client.post(
            "/auth/google",
            json={
                "request_uri": "http://localhost/__/auth/handler",
                "session_id": start.json()["session_id"],
                "post_body": "email=g@x.com&providerId=google.com",
            },
        )
        self.assertEqual(response.status_code, 200)
        uid = response.json()["user"]["uid"]
        self.assertEqual(response.json()["provider_id"], "google.com")
        self.assertEqual(self.identity.get_user_document(uid)["email"], "g@x.com")

    def test_update_email_routes(self):
        uid = self._register().json()["uid"]

        response = self.client.post(
            "/update/email", json={"uid": "someone-else", "new_email": "n@x.com"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(
            response.json(),
            {"message": "No user is currently signed in or UID mismatch"},
        )

        response = self.client.post(
            "/update/email", json={"uid": uid, "new_email": "n@x.com"}
        )
        self.assertEqual(response.json(), {"message": "Email updated successfully"})

        response = self.client.post(
            "/update/email/verify", json={"uid": uid, "new_email": "m@x.com"}
        )
        self.assertEqual(
            response.json(),
            {"message": "Verification email sent. Please verify your new email."},
        )

        self.client.post("/auth/logout")
        response = self.client.post(
            "/update/email", json={"uid": uid, "new_email": "o@x.com"}
        )
        self.assertEqual(response.status_code, 401)

    def test_profile_not_found(self):
        response = self.client.get("/api/data/profile/missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"detail": "Profile not found"})

    def test_admin_lists_users(self):
        self._register()
        self._register(email="b@x.com")
        response = self.client.get("/api/admin/users")
        self.assertEqual(response.status_code, 200)
        emails = sorted(user["profile"]["email"] for user in response.json()["users"])
        self.assertEqual(emails, ["a@x.com", "b@x.com"])

    def test_task_lifecycle(self):
        uid = self._register().json()["uid"]

        created = self.client.post(f"/api/task/{uid}", json={"title": "Write report"})
        self.assertEqual(created.status_code, 201)
        task_id = created.json()["task_id"]
        self.assertFalse(created.json()["completed"])

        updated = self.client.patch(
            f"/api/task/{uid}/{task_id}", json={"completed": True}
        )
        self.assertEqual(updated.status_code, 200)
        self.assertTrue(updated.json()["completed"])
        self.assertEqual(updated.json()["title"], "Write report")

        listed = self.client.get(f"/api/task/{uid}")
        self.assertEqual([t["task_id"] for t in listed.json()["tasks"]], [task_id])

        deleted = self.client.delete(f"/api/task/{uid}/{task_id}")
        self.assertEqual(deleted.status_code, 204)
        missing = self.client.delete(f"/api/task/{uid}/{task_id}")
        self.assertEqual(missing.status_code, 404)

    def test_task_update_ignores_null_fields(self):
        uid = self._register().json()["uid"]
        task_id = self.client.post(
            f"/api/task/{uid}", json={"title": "Write report"}
        ).json()["task_id"]

        updated = self.client.patch(
            f"/api/task/{uid}/{task_id}",
            json={"title": None, "completed": None, "description": "draft"},
        )
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["title"], "Write report")
        self.assertFalse(updated.json()["completed"])
        self.assertEqual(updated.json()["description"], "draft")

        listed = self.client.get(f"/api/task/{uid}")
        self.assertEqual(listed.status_code, 200)
        self.assertEqual(listed.json()["tasks"][0]["title"], "Write report")

    def test_tasks_for_unknown_user(self):
        response = self.client.get("/api/task/ghost")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"detail": "User not found"})


class StaticServingTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "uploads").mkdir()
        (self.root / "uploads" / "report.txt").write_text("quarterly")
        build = self.root / "build"
        (build / "static").mkdir(parents=True)
        (build / "index.html").write_text("<html>izz</html>")
        (build / "static" / "app.js").write_text("console.log('izz')")

    def tearDown(self):
        self._tmp.cleanup()

    def _client(self, **overrides) -> TestClient:
        settings = _settings(uploads_dir=str(self.root / "uploads"), **overrides)
        app = create_app(settings)
        app.dependency_overrides[get_identity_client] = lambda: IdentityClient(
            InMemoryIdentityProvider(), InMemoryDocumentStore()
        )
        return TestClient(app)

    def test_uploads_are_served(self):
        client = self._client()
        self.assertEqual(client.get("/uploads/report.txt").text, "quarterly")
        missing = client.get("/uploads/missing.txt")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json(), {"message": "Route not found"})

    def test_production_serves_client_build_with_fallback(self):
        client = self._client(
            environment="production", static_build_dir=str(self.root / "build")
        )
        self.assertEqual(client.get("/static/app.js").text, "console.log('izz')")
        self.assertEqual(client.get("/dashboard/settings").text, "<html>izz</html>")
        self.assertEqual(client.get("/").json(), {"message": "Hello, from izz"})
        self.assertEqual(client.get("/api/data/profile/x").status_code, 404)
        self.assertEqual(client.get("/uploads/report.txt").text, "quarterly")

    def test_production_unmatched_non_get_returns_uniform_404(self):
        client = self._client(
            environment="production", static_build_dir=str(self.root / "build")
        )
        for method, path in [("post", "/does/not/exist"), ("delete", "/dashboard")]:
            response = getattr(client, method)(path)
            self.assertEqual(response.status_code, 404)
            self.assertEqual(response.json(), {"message": "Route not found"})

    def test_development_does_not_serve_client_build(self):
        client = self._client(static_build_dir=str(self.root / "build"))
        response = client.get("/static/app.js")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "Route not found"})


if __name__ == "__main__":
    unittest.main()
