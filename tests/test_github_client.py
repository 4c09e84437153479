"""Tests for the GitHub REST client against an httpx mock transport."""

import base64
import json

import httpx
import pytest

from integrations.github import GitHubClient, GitHubError


def make_client(handler, owner="octo") -> GitHubClient:
    return GitHubClient(token="t0k3n", owner=owner, transport=httpx.MockTransport(handler))


class TestErrors:
    @pytest.mark.parametrize(
        "status, body, message",
        [
            (404, "{}", "Not found"),
            (401, "{}", "authentication failed"),
            (403, '{"message": "API rate limit exceeded"}', "rate limit"),
            (403, '{"message": "Resource not accessible"}', "Access denied"),
            (500, "boom", "500 - boom"),
        ],
    )
    def test_status_mapping(self, status, body, message):
        client = make_client(lambda request: httpx.Response(status, text=body))

        with pytest.raises(GitHubError, match=message) as excinfo:
            client.get_repository("shop-api")

        assert excinfo.value.status_code == status

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(GitHubError) as excinfo:
            make_client(handler).get_authenticated_user()

        assert excinfo.value.status_code is None

    def test_repo_without_owner(self, monkeypatch):
        monkeypatch.delenv("GITHUB_USERNAME", raising=False)
        client = make_client(lambda request: httpx.Response(200, json={}), owner="")

        with pytest.raises(ValueError):
            client.get_repository("shop-api")


def test_auth_header_and_owner_resolution():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"name": "shop-api"})

    client = make_client(handler)
    client.get_repository("shop-api")
    client.get_repository("other/lib")

    assert seen[0].headers["Authorization"] == "Bearer t0k3n"
    assert seen[0].url.path == "/repos/octo/shop-api"
    assert seen[1].url.path == "/repos/other/lib"


def test_create_branch_already_exists():
    def handler(request):
        if request.method == "GET" and request.url.path == "/repos/octo/app":
            return httpx.Response(200, json={"default_branch": "main"})
        if request.url.path.endswith("/git/ref/heads/main"):
            return httpx.Response(200, json={"object": {"sha": "abc"}})
        return httpx.Response(422, json={"message": "Reference already exists"})

    assert make_client(handler).create_branch("app", "feature-x") is False


def test_commit_files_uses_git_data_api():
    calls = []

    def handler(request):
        path = request.url.path
        calls.append((request.method, path))
        if path.endswith("/git/ref/heads/feature"):
            return httpx.Response(200, json={"object": {"sha": "head"}})
        if path.endswith("/git/commits/head"):
            return httpx.Response(200, json={"tree": {"sha": "base-tree"}})
        if path.endswith("/git/blobs"):
            content = base64.b64decode(json.loads(request.content)["content"]).decode()
            return httpx.Response(201, json={"sha": f"blob-{content}"})
        if path.endswith("/git/trees"):
            body = json.loads(request.content)
            assert body["base_tree"] == "base-tree"
            assert {entry["sha"] for entry in body["tree"]} == {"blob-a", "blob-b"}
            return httpx.Response(201, json={"sha": "tree"})
        if path.endswith("/git/commits"):
            assert json.loads(request.content)["parents"] == ["head"]
            return httpx.Response(201, json={"sha": "new-commit-sha"})
        if path.endswith("/git/refs/heads/feature"):
            return httpx.Response(200, json={})
        raise AssertionError(f"unexpected {request.method} {path}")

    sha = make_client(handler).commit_files("app", "feature", {"a.txt": "a", "b.txt": "b"}, "Add files")

    assert sha == "new-commit-sha"
    assert calls[-1] == ("PATCH", "/repos/octo/app/git/refs/heads/feature")


class TestContents:
    def test_read_missing_file(self):
        client = make_client(lambda request: httpx.Response(404))

        assert client.read_file("app", "package.json") is None

    def test_read_file_decodes(self):
        encoded = base64.b64encode(b'{"name": "app"}').decode()
        client = make_client(lambda request: httpx.Response(200, json={"content": encoded, "sha": "s1"}))

        assert client.read_file("app", "package.json") == '{"name": "app"}'

    def test_put_file_overwrites_with_sha(self):
        bodies = []

        def handler(request):
            if request.method == "GET":
                return httpx.Response(200, json={"sha": "old-sha"})
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"content": {"path": "server.js"}})

        make_client(handler).put_file("app", "server.js", "console.log(1)", "Fix", branch="hotfix")

        assert bodies[0]["sha"] == "old-sha"
        assert bodies[0]["branch"] == "hotfix"
        assert base64.b64decode(bodies[0]["content"]).decode() == "console.log(1)"

    def test_put_new_file_has_no_sha(self):
        bodies = []

        def handler(request):
            if request.method == "GET":
                return httpx.Response(404)
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={})

        make_client(handler).put_file("app", "railway.json", "{}", "Add")

        assert "sha" not in bodies[0]
        assert "branch" not in bodies[0]

    def test_list_directory(self):
        seen = []

        def handler(request):
            seen.append(request.url)
            return httpx.Response(200, json=[{"name": "server.js", "path": "server.js", "type": "file"}])

        entries = make_client(handler).list_directory("app", ref="main")

        assert [entry["name"] for entry in entries] == ["server.js"]
        assert seen[0].path == "/repos/octo/app/contents/"
        assert seen[0].params["ref"] == "main"

    def test_list_directory_of_a_file(self):
        client = make_client(lambda request: httpx.Response(200, json={"name": "README.md", "type": "file"}))

        assert client.list_directory("app", "README.md") == []


def test_merge_returns_none_on_empty_body():
    client = make_client(lambda request: httpx.Response(204))

    assert client.merge_pull_request("app", 3) is None
