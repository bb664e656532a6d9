import unittest

from fastapi.testclient import TestClient

from vault_backend.app import create_app
from vault_backend.github import GitHubClient
from vault_backend.tests.fakes import (
    API,
    OAUTH_URL,
    RAW,
    FakeGitHub,
    make_response,
    make_settings,
)

REPOS_URL = f"{API}/user/repos"
FRONTEND = "https://blockbook.example.com"


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.github = FakeGitHub()
        settings = make_settings(frontend_url=FRONTEND)
        self.app = create_app(
            settings, github_client=GitHubClient(settings, session=self.github.session)
        )
        self.client = TestClient(self.app)

    def test_invalid_codes_are_rejected_before_github(self):
        for params in ({}, {"code": ""}, {"code": "abc$"}, {"code": "a b"}, {"code": "../x"}):
            response = self.client.get("/getAccessToken", params=params)
            self.assertEqual(response.status_code, 400, params)
            self.assertEqual(response.json(), {"error": "Invalid authorization code"})
        self.github.session.request.assert_not_called()

    def test_get_access_token(self):
        self.github.add("POST", OAUTH_URL, make_response(200, {"access_token": "gho_1"}))

        response = self.client.get("/getAccessToken", params={"code": "Ab_9-x"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"token": "gho_1"})

    def test_get_access_token_relays_oauth_error(self):
        self.github.add(
            "POST", OAUTH_URL, make_response(200, {"error": "bad_verification_code"})
        )

        response = self.client.get("/getAccessToken", params={"code": "expired"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "bad_verification_code"})

    def test_vault_requires_token(self):
        for params in ({}, {"token": ""}):
            response = self.client.get("/getVaultRepository", params=params)
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json(), {"error": "Token is required."})
        self.github.session.request.assert_not_called()

    def test_existing_vault(self):
        vault = {"name": "test-blockbook-vault", "full_name": "octo/test-blockbook-vault"}
        self.github.add("GET", REPOS_URL, make_response(200, [vault]))

        response = self.client.get("/getVaultRepository", params={"token": "tok"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(), {"message": "Repository already exists", "repo": vault}
        )
        self.assertEqual(self.github.calls("POST"), [])

    def test_missing_vault_is_created(self):
        created = {"name": "test-blockbook-vault", "private": True}
        self.github.add("GET", REPOS_URL, make_response(200, []))
        self.github.add("POST", REPOS_URL, make_response(201, created))

        response = self.client.get("/getVaultRepository", params={"token": "tok"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(), {"message": "Repository created successfully", "repo": created}
        )
        self.assertEqual(len(self.github.calls("POST", REPOS_URL)), 1)

    def test_missing_vault_lookup_only(self):
        self.github.add("GET", REPOS_URL, make_response(200, [{"name": "other"}]))

        response = self.client.get(
            "/getVaultRepository", params={"token": "tok", "create": "false"}
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "Vault repository does not exist."})

    def test_vault_creation_error_is_a_server_error(self):
        self.github.add("GET", REPOS_URL, make_response(200, []))
        self.github.add(
            "POST", REPOS_URL, make_response(422, {"message": "name already exists"})
        )

        with self.assertLogs("vault_backend.services", level="ERROR"):
            response = self.client.get("/getVaultRepository", params={"token": "tok"})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "name already exists"})

    def test_get_all_files_requires_params(self):
        response = self.client.get("/getAllFiles", params={"owner": "octo", "repo": "notes"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Token is required."})

        response = self.client.get("/getAllFiles", params={"repo": "notes", "token": "tok"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Owner and repo parameters are required."})
        self.github.session.request.assert_not_called()

    def test_get_all_files(self):
        self.github.add(
            "GET",
            f"{API}/repos/octo/notes/contents/",
            make_response(
                200,
                [
                    {
                        "type": "file",
                        "name": "a.md",
                        "path": "a.md",
                        "download_url": f"{RAW}/octo/notes/main/a.md",
                    }
                ],
            ),
        )
        self.github.add("GET", f"{RAW}/octo/notes/main/a.md", make_response(200, text="# A"))

        response = self.client.get(
            "/getAllFiles", params={"owner": "octo", "repo": "notes", "token": "tok"}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "message": "Files fetched successfully",
                "files": [{"id": 0, "name": "a.md", "path": "a.md", "content": "# A"}],
            },
        )

    def test_get_all_files_failure(self):
        self.github.add(
            "GET",
            f"{API}/repos/octo/notes/contents/",
            make_response(404, {"message": "Not Found"}),
        )

        with self.assertLogs("vault_backend.services", level="ERROR"):
            response = self.client.get(
                "/getAllFiles", params={"owner": "octo", "repo": "notes", "token": "tok"}
            )

        self.assertEqual(response.status_code, 500)
        payload = response.json()
        self.assertEqual(payload["error"], "Failed to fetch files.")
        self.assertIn("Not Found", payload["details"])

    def test_get_all_files_non_json_listing(self):
        self.github.add(
            "GET",
            f"{API}/repos/octo/notes/contents/",
            make_response(200, text="<html>maintenance</html>"),
        )

        with self.assertLogs("vault_backend.services", level="ERROR"):
            response = self.client.get(
                "/getAllFiles", params={"owner": "octo", "repo": "notes", "token": "tok"}
            )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "Failed to fetch files.")

    def test_add_new_file(self):
        url = f"{API}/repos/octo/notes/contents/hello.md"
        self.github.add(
            "PUT",
            url,
            make_response(201, {"content": {"name": "hello.md", "path": "hello.md", "sha": "b6fc4c"}}),
        )

        response = self.client.put(
            "/addNewFileToVault",
            params={
                "owner": "octo",
                "repo": "notes",
                "path": "hello.md",
                "fileContent": "hello",
                "token": "tok",
            },
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(
            response.json(),
            {
                "message": "File added successfully",
                "file": {"name": "hello.md", "path": "hello.md", "sha": "b6fc4c"},
            },
        )
        self.assertEqual(self.github.calls("PUT", url)[0].kwargs["json"]["content"], "aGVsbG8=")

    def test_add_new_file_requires_params(self):
        response = self.client.put(
            "/addNewFileToVault",
            params={"owner": "octo", "repo": "notes", "path": "a.md", "fileContent": "x"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Token is required."})

        response = self.client.put(
            "/addNewFileToVault",
            params={"owner": "octo", "repo": "notes", "path": "a.md", "token": "tok"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(),
            {"error": "Owner, repo, file path, and file content are required."},
        )
        self.github.session.request.assert_not_called()

    def test_add_new_file_forwards_github_error(self):
        self.github.add(
            "PUT",
            f"{API}/repos/octo/notes/contents/a.md",
            make_response(422, {"message": "Invalid request.\n\n\"sha\" wasn't supplied."}),
        )

        response = self.client.put(
            "/addNewFileToVault",
            params={
                "owner": "octo",
                "repo": "notes",
                "path": "a.md",
                "fileContent": "x",
                "token": "tok",
            },
        )

        self.assertEqual(response.status_code, 422)
        self.assertIn("sha", response.json()["error"])

    def test_cors_allows_frontend_origin(self):
        response = self.client.options(
            "/getVaultRepository",
            headers={"Origin": FRONTEND, "Access-Control-Request-Method": "GET"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["access-control-allow-origin"], FRONTEND)
        self.assertEqual(response.headers["access-control-allow-credentials"], "true")

    def test_security_headers(self):
        response = self.client.get("/getVaultRepository")

        self.assertEqual(response.headers["x-content-type-options"], "nosniff")
        self.assertEqual(response.headers["x-frame-options"], "SAMEORIGIN")
        self.assertEqual(response.headers["referrer-policy"], "no-referrer")

    def test_unexpected_errors_return_500(self):
        self.github.add("GET", REPOS_URL, RuntimeError("boom"))
        client = TestClient(self.app, raise_server_exceptions=False)

        with self.assertLogs("vault_backend.app", level="ERROR"):
            response = client.get("/getVaultRepository", params={"token": "tok"})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Internal server error", "details": "boom"})
        self.assertEqual(response.headers["x-content-type-options"], "nosniff")
        self.assertEqual(response.headers["x-frame-options"], "SAMEORIGIN")


if __name__ == "__main__":
    unittest.main()
