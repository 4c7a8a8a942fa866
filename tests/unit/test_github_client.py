"""Unit tests for the GitHub REST client."""

import base64
from unittest.mock import MagicMock, Mock, patch

import pytest
import requests

from models import CreateFileRequest, CreateRepoRequest, EnablePagesRequest, ReadFileRequest
from services.github_client import GitHubClient
from utils import RepositoryHostingError

REPO_BODY = {
    "id": 1,
    "name": "demo-site",
    "full_name": "octo-test/demo-site",
    "description": "",
    "private": False,
    "html_url": "https://github.com/octo-test/demo-site",
    "clone_url": "https://github.com/octo-test/demo-site.git",
    "default_branch": "main",
    "created_at": "2024-01-15T10:00:00Z",
    "updated_at": "2024-01-15T10:00:00Z",
    "owner": {"login": "octo-test", "id": 7, "avatar_url": "https://example.test/a.png"},
}


def _file_body(content: str = "<h1>Hi</h1>", type_: str = "file") -> dict:
    return {
        "name": "index.html",
        "path": "index.html",
        "sha": "abc123",
        "size": len(content),
        "url": "https://api.github.com/repos/octo-test/demo-site/contents/index.html",
        "html_url": "https://github.com/octo-test/demo-site/blob/main/index.html",
        "git_url": "https://api.github.com/repos/octo-test/demo-site/git/blobs/abc123",
        "download_url": "https://raw.example.test/index.html",
        "type": type_,
        "content": base64.b64encode(content.encode()).decode(),
        "encoding": "base64",
    }


def _response(status_code: int, body=None) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.reason = "Reason"
    response.json.return_value = body if body is not None else {"message": "upstream message"}
    return response


class TestGitHubClient:
    """Test cases for GitHubClient class."""

    @pytest.fixture
    def github_client(self, mock_config) -> GitHubClient:
        return GitHubClient(mock_config)

    @pytest.fixture
    def mock_session(self):
        with patch("services.github_client.requests.Session") as session_class:
            session = MagicMock()
            session_class.return_value.__enter__.return_value = session
            yield session

    def test_requires_token(self, config_factory) -> None:
        with pytest.raises(ValueError):
            GitHubClient(config_factory(github_token=""))

    @pytest.mark.asyncio
    async def test_create_repository(self, github_client, mock_session) -> None:
        mock_session.request.return_value = _response(201, REPO_BODY)

        repo = await github_client.create_repository(CreateRepoRequest(name="demo-site"))

        assert repo.html_url == "https://github.com/octo-test/demo-site"
        call = mock_session.request.call_args.kwargs
        assert call["method"] == "POST"
        assert call["url"] == "https://api.github.com/user/repos"
        assert call["json"] == {
            "name": "demo-site",
            "description": "",
            "private": False,
            "auto_init": True,
        }
        assert call["headers"]["Authorization"] == "token test-github-token"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, code, http_status",
        [(422, "conflict", 409), (401, "unauthorized", 401), (500, "bad_request", 400)],
    )
    async def test_create_repository_errors(
        self, github_client, mock_session, status, code, http_status
    ) -> None:
        mock_session.request.return_value = _response(status)

        with pytest.raises(RepositoryHostingError) as exc_info:
            await github_client.create_repository(CreateRepoRequest(name="demo-site"))

        assert exc_info.value.code == code
        assert exc_info.value.status_code == http_status

    @pytest.mark.asyncio
    async def test_create_repository_conflict_message(self, github_client, mock_session) -> None:
        mock_session.request.return_value = _response(422)

        with pytest.raises(RepositoryHostingError) as exc_info:
            await github_client.create_repository(CreateRepoRequest(name="demo-site"))

        assert exc_info.value.message == 'Repository "demo-site" already exists'

    @pytest.mark.asyncio
    async def test_network_error_is_bad_request(self, github_client, mock_session) -> None:
        mock_session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(RepositoryHostingError) as exc_info:
            await github_client.create_repository(CreateRepoRequest(name="demo-site"))

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_create_file_encodes_content(self, github_client, mock_session) -> None:
        mock_session.request.return_value = _response(201, {"content": _file_body()})

        entry = await github_client.create_file(
            CreateFileRequest(owner="octo-test", repo="demo-site", path="index.html", content="<h1>Hi</h1>")
        )

        assert entry.sha == "abc123"
        call = mock_session.request.call_args.kwargs
        assert call["method"] == "PUT"
        assert call["url"].endswith("/repos/octo-test/demo-site/contents/index.html")
        assert base64.b64decode(call["json"]["content"]).decode() == "<h1>Hi</h1>"
        assert call["json"]["message"] == "Add file via API"
        assert call["json"]["branch"] == "main"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status, code", [(404, "not_found"), (422, "conflict")])
    async def test_create_file_errors(self, github_client, mock_session, status, code) -> None:
        mock_session.request.return_value = _response(status)

        with pytest.raises(RepositoryHostingError) as exc_info:
            await github_client.create_file(
                CreateFileRequest(owner="octo-test", repo="demo-site", path="index.html", content="x")
            )

        assert exc_info.value.code == code

    @pytest.mark.asyncio
    async def test_read_file_decodes_content(self, github_client, mock_session) -> None:
        mock_session.request.return_value = _response(200, _file_body("héllo"))

        file = await github_client.read_file(
            ReadFileRequest(owner="octo-test", repo="demo-site", path="index.html", branch="dev")
        )

        assert file.content == "héllo"
        assert file.sha == "abc123"
        assert mock_session.request.call_args.kwargs["params"] == {"ref": "dev"}

    @pytest.mark.asyncio
    async def test_read_file_rejects_directory(self, github_client, mock_session) -> None:
        mock_session.request.return_value = _response(200, [_file_body()])

        with pytest.raises(RepositoryHostingError) as exc_info:
            await github_client.read_file(ReadFileRequest(owner="octo-test", repo="demo-site", path="src"))

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_read_file_rejects_binary_content(self, github_client, mock_session) -> None:
        body = _file_body()
        body["content"] = base64.b64encode(b"\xff\xfe\x00").decode()
        mock_session.request.return_value = _response(200, body)

        with pytest.raises(RepositoryHostingError) as exc_info:
            await github_client.read_file(ReadFileRequest(owner="octo-test", repo="demo-site", path="logo.png"))

        assert exc_info.value.code == "bad_request"
        assert exc_info.value.message == "File is not UTF-8 text"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_read_file_not_found(self, github_client, mock_session) -> None:
        mock_session.request.return_value = _response(404)

        with pytest.raises(RepositoryHostingError) as exc_info:
            await github_client.read_file(ReadFileRequest(owner="octo-test", repo="demo-site", path="nope.html"))

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_update_file_sends_current_sha(self, github_client, mock_session) -> None:
        mock_session.request.side_effect = [
            _response(200, _file_body("old")),
            _response(200, {"content": _file_body("new")}),
        ]

        await github_client.update_file(
            CreateFileRequest(owner="octo-test", repo="demo-site", path="index.html", content="new")
        )

        update_call = mock_session.request.call_args_list[1].kwargs
        assert update_call["method"] == "PUT"
        assert update_call["json"]["sha"] == "abc123"
        assert update_call["json"]["message"] == "Update file via API"

    @pytest.mark.asyncio
    async def test_enable_pages(self, github_client, mock_session) -> None:
        mock_session.request.return_value = _response(
            201,
            {
                "url": "https://api.github.com/repos/octo-test/demo-site/pages",
                "status": "queued",
                "html_url": "https://octo-test.github.io/demo-site/",
                "source": {"branch": "main", "path": "/"},
            },
        )

        pages = await github_client.enable_pages(EnablePagesRequest(owner="octo-test", repo="demo-site"))

        assert pages.html_url == "https://octo-test.github.io/demo-site/"
        assert mock_session.request.call_args.kwargs["json"] == {"source": {"branch": "main", "path": "/"}}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status, code", [(404, "not_found"), (409, "conflict"), (400, "bad_request")])
    async def test_enable_pages_errors(self, github_client, mock_session, status, code) -> None:
        mock_session.request.return_value = _response(status)

        with pytest.raises(RepositoryHostingError) as exc_info:
            await github_client.enable_pages(EnablePagesRequest(owner="octo-test", repo="demo-site"))

        assert exc_info.value.code == code

    @pytest.mark.asyncio
    async def test_get_pages_url_none_when_disabled(self, github_client, mock_session) -> None:
        mock_session.request.return_value = _response(404)

        assert await github_client.get_pages_url("octo-test", "demo-site") is None
