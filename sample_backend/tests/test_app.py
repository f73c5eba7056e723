import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from sample_backend.app import create_app
from sample_backend.config import Settings
from sample_backend.db import Database
from sample_backend.tokens import encode_token


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.db = Database("sqlite+pysqlite:///:memory:")
        self.app = create_app(Settings(), database=self.db)
        self.client = TestClient(self.app)

    def tearDown(self):
        self.db.dispose()

    def assertError(self, response, status_code, message=None):
        self.assertEqual(response.status_code, status_code)
        payload = response.json()
        self.assertIs(payload["success"], False)
        self.assertNotIn("data", payload)
        if message is not None:
            self.assertEqual(payload["error"], message)

    def data(self, response, status_code=200):
        self.assertEqual(response.status_code, status_code, response.text)
        payload = response.json()
        self.assertIs(payload["success"], True)
        return payload["data"]


class PostsApiTests(ApiTestCase):
    def test_list_seeded_posts_newest_first(self):
        posts = self.data(self.client.get("/api/posts"))
        self.assertEqual(len(posts), 3)
        self.assertEqual(posts[0]["title"], "Third post")
        ids = [post["id"] for post in posts]
        self.assertEqual(ids, sorted(ids, reverse=True))
        self.assertEqual(
            set(posts[0]), {"id", "title", "content", "createdAt", "updatedAt"}
        )

    def test_create_then_get(self):
        created = self.data(
            self.client.post("/api/posts", json={"title": " Hi ", "content": "There "}),
            201,
        )
        self.assertEqual(created["title"], "Hi")
        self.assertEqual(created["content"], "There")
        self.assertEqual(created["createdAt"], created["updatedAt"])

        fetched = self.data(self.client.get(f"/api/posts/{created['id']}"))
        self.assertEqual(fetched, created)

        ids = [post["id"] for post in self.data(self.client.get("/api/posts"))]
        self.assertEqual(ids[0], created["id"])

    def test_create_validation(self):
        response = self.client.post("/api/posts", json={"title": "", "content": "x"})
        self.assertError(response, 422, "title is required.")
        response = self.client.post("/api/posts", json={"title": "x"})
        self.assertError(response, 422, "content is required.")
        response = self.client.post("/api/posts")
        self.assertError(response, 422, "title is required.")

    def test_create_with_malformed_json(self):
        response = self.client.post(
            "/api/posts",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertError(response, 422)

    def test_update_moves_updated_at_forward(self):
        with patch(
            "sample_backend.posts.utc_now", return_value="2026-01-01T00:00:00.000000Z"
        ):
            created = self.data(
                self.client.post("/api/posts", json={"title": "a", "content": "b"}), 201
            )
        with patch(
            "sample_backend.posts.utc_now", return_value="2026-01-01T00:00:01.000000Z"
        ):
            updated = self.data(
                self.client.put(
                    f"/api/posts/{created['id']}", json={"title": "a2", "content": "b2"}
                )
            )
        self.assertEqual(updated["id"], created["id"])
        self.assertEqual(updated["createdAt"], created["createdAt"])
        self.assertGreater(updated["updatedAt"], created["updatedAt"])
        self.assertEqual(updated["title"], "a2")

    def test_update_errors(self):
        response = self.client.put("/api/posts/abc", json={"title": "", "content": ""})
        self.assertError(response, 422, "Invalid id.")
        response = self.client.put("/api/posts/1", json={"title": "", "content": "x"})
        self.assertError(response, 422, "title is required.")
        response = self.client.put("/api/posts/99999", json={"title": "t", "content": "c"})
        self.assertError(response, 404, "Post not found.")

    def test_delete_twice(self):
        self.assertEqual(self.data(self.client.delete("/api/posts/2")), {"id": 2})
        self.assertError(self.client.delete("/api/posts/2"), 404, "Post not found.")
        self.assertError(self.client.get("/api/posts/2"), 404)

    def test_get_invalid_and_missing_ids(self):
        self.assertError(self.client.get("/api/posts/abc"), 422, "Invalid id.")
        self.assertError(self.client.get("/api/posts/99999"), 404, "Post not found.")
        self.assertError(self.client.delete("/api/posts/1.5"), 422, "Invalid id.")

    def test_ids_beyond_integer_range_are_not_found(self):
        path = "/api/posts/99999999999999999999999"
        self.assertError(self.client.get(path), 404, "Post not found.")
        response = self.client.put(path, json={"title": "t", "content": "c"})
        self.assertError(response, 404, "Post not found.")
        self.assertError(self.client.delete(path), 404, "Post not found.")
        self.assertError(self.client.get("/api/posts/-99999999999999999999999"), 404)


class AuthApiTests(ApiTestCase):
    def test_signup_returns_token_and_user(self):
        payload = self.data(
            self.client.post(
                "/api/auth/signup",
                json={"name": "Ann", "email": " Ann@Example.com ", "password": "pw"},
            ),
            201,
        )
        self.assertEqual(payload["user"]["email"], "ann@example.com")
        self.assertEqual(set(payload["user"]), {"id", "name", "email", "createdAt"})
        me = self.data(
            self.client.get(
                "/api/auth/me", headers={"Authorization": f"Bearer {payload['token']}"}
            )
        )
        self.assertEqual(me["user"], payload["user"])

    def test_signup_duplicate_email_any_case(self):
        response = self.client.post(
            "/api/auth/signup",
            json={"name": "Dup", "email": "DEMO@Sample.com", "password": "x"},
        )
        self.assertError(response, 409, "This email is already registered.")
        count = self.db.query_one("SELECT COUNT(*) AS count FROM users")["count"]
        self.assertEqual(count, 1)

    def test_signup_validation(self):
        response = self.client.post("/api/auth/signup", json={"name": "Ann"})
        self.assertError(response, 422, "name, email, password are required.")

    def test_login_flow(self):
        response = self.client.post(
            "/api/auth/login", json={"email": "demo@sample.com", "password": "wrong"}
        )
        self.assertError(response, 401, "Invalid email or password.")

        response = self.client.post(
            "/api/auth/login", json={"email": "nobody@sample.com", "password": "1234"}
        )
        self.assertError(response, 401, "Invalid email or password.")

        payload = self.data(
            self.client.post(
                "/api/auth/login", json={"email": "Demo@Sample.com", "password": "1234"}
            )
        )
        self.assertEqual(payload["user"]["name"], "Demo User")
        self.assertNotIn("password", payload["user"])

        me = self.data(
            self.client.get(
                "/api/auth/me", headers={"Authorization": f"Bearer {payload['token']}"}
            )
        )
        self.assertEqual(me["user"]["email"], "demo@sample.com")

    def test_login_validation(self):
        response = self.client.post("/api/auth/login", json={"email": "a@b.c"})
        self.assertError(response, 422, "email and password are required.")

    def test_me_requires_bearer_token(self):
        self.assertError(self.client.get("/api/auth/me"), 401, "Bearer token is required.")
        response = self.client.get("/api/auth/me", headers={"Authorization": "Token abc"})
        self.assertError(response, 401, "Bearer token is required.")

    def test_me_rejects_bad_tokens(self):
        token = self.data(
            self.client.post(
                "/api/auth/login", json={"email": "demo@sample.com", "password": "1234"}
            )
        )["token"]
        for bad in (
            token[:1],
            "not-base64!!",
            "%%%",
            encode_token(1, "other@sample.com"),
            encode_token(10**23, "demo@sample.com"),
        ):
            with self.subTest(token=bad):
                response = self.client.get(
                    "/api/auth/me", headers={"Authorization": f"Bearer {bad}"}
                )
                self.assertError(response, 401, "Invalid token.")


class UtilityApiTests(ApiTestCase):
    def test_health(self):
        payload = self.data(self.client.get("/api/health"))
        self.assertEqual(payload["service"], "sample-backend")
        self.assertEqual(payload["sqlite"], ":memory:")
        self.assertTrue(payload["now"].endswith("Z"))

    def test_greeting(self):
        payload = self.data(self.client.get("/api/greeting", params={"name": " Kim "}))
        self.assertEqual(payload["message"], "Hello, Kim!")
        self.assertIn("createdAt", payload)
        payload = self.data(self.client.get("/api/greeting"))
        self.assertEqual(payload["message"], "Hello, Guest!")
        payload = self.data(self.client.get("/api/greeting", params={"name": "  "}))
        self.assertEqual(payload["message"], "Hello, Guest!")

    def test_sum(self):
        payload = self.data(self.client.post("/api/sum", json={"a": 2, "b": 3}))
        self.assertEqual(payload, {"a": 2, "b": 3, "result": 5})
        payload = self.data(self.client.post("/api/sum", json={"a": "1.5", "b": 2}))
        self.assertEqual(payload["result"], 3.5)

    def test_sum_rejects_non_numbers(self):
        response = self.client.post("/api/sum", json={"a": "x", "b": 3})
        self.assertError(response, 422, "a and b must be numbers.")
        self.assertError(self.client.post("/api/sum", json={}), 422)

    def test_fail_always_errors(self):
        for params in ({}, {"anything": "1"}):
            with self.subTest(params=params):
                response = self.client.get("/api/fail", params=params)
                self.assertError(response, 500, "This endpoint always fails for demo.")

    def test_unmatched_routes(self):
        self.assertError(self.client.get("/api/nope"), 404, "API route not found.")
        self.assertError(self.client.get("/elsewhere"), 404, "API route not found.")
        self.assertError(self.client.patch("/api/posts/1", json={}), 404, "API route not found.")

    def test_cors_reflects_any_origin(self):
        response = self.client.get("/api/health", headers={"Origin": "http://localhost:5173"})
        self.assertEqual(response.headers.get("access-control-allow-origin"), "*")

    def test_storage_errors_become_500(self):
        self.db.execute("DROP TABLE posts")
        response = self.client.get("/api/posts")
        self.assertError(response, 500)
        self.assertIn("posts", response.json()["error"])


if __name__ == "__main__":
    unittest.main()
