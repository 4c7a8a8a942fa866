"""GitHub REST client used by the repository tools."""

import asyncio
import base64
import binascii
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from config import ApplicationConfig
from models import (
    CreateFileRequest,
    CreateRepoRequest,
    EnablePagesRequest,
    FileContent,
    FileResponse,
    PagesSite,
    ReadFileRequest,
    Repository,
)
from utils import RepositoryHostingError, create_contextual_logger


def _conflict(message: str) -> RepositoryHostingError:
    return RepositoryHostingError(code="conflict", message=message, http_status=409)


def _not_found(message: str) -> RepositoryHostingError:
    return RepositoryHostingError(code="not_found", message=message, http_status=404)


def _bad_request(message: str) -> RepositoryHostingError:
    return RepositoryHostingError(code="bad_request", message=message, http_status=400)


class GitHubResponseError(Exception):
    """Non-2xx response or transport failure from the GitHub API."""

    def __init__(self, status_code: Optional[int], detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class GitHubClient:
    """Thin async wrapper over the GitHub REST API.

    Calls run through ``requests`` in the default executor. Each operation
    maps upstream failures onto ``RepositoryHostingError`` with the status
    class the caller should see.
    """

    def __init__(self, config: ApplicationConfig) -> None:
        if not config.github_token:
            raise ValueError("GITHUB_TOKEN is required for the repository tools")
        self.config = config
        self.base_url = config.github_base_api
        self.owner = config.github_owner
        self.timeout = config.github_timeout_seconds
        self.logger = create_contextual_logger(__name__, service="github_client")

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github.v3+json",
            "Authorization": f"token {self.config.github_token}",
            "Content-Type": "application/json",
            "User-Agent": f"Chat-Relay/{self.config.app_version}",
        }

    def _execute_sync_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        try:
            with requests.Session() as session:
                response = session.request(
                    method=method,
                    url=self.base_url + endpoint,
                    json=data,
                    params=params,
                    headers=self._headers(),
                    timeout=self.timeout,
                )
        except requests.exceptions.RequestException as e:
            raise GitHubResponseError(None, str(e)) from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("message") or response.reason
            except (ValueError, AttributeError):
                detail = response.reason or ""
            raise GitHubResponseError(response.status_code, str(detail))

        self.logger.debug(
            "GitHub API response",
            method=method,
            endpoint=endpoint,
            status=response.status_code,
        )
        return response.json()

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self._execute_sync_request, method, endpoint, data, params
        )

    def _log_failure(self, action: str, error: GitHubResponseError, **context: Any) -> None:
        self.logger.error(
            f"Failed to {action}",
            status=error.status_code,
            error=error.detail,
            **context,
        )

    @staticmethod
    def _encode(content: str) -> str:
        return base64.b64encode(content.encode("utf-8")).decode("ascii")

    async def create_repository(self, request: CreateRepoRequest) -> Repository:
        self.logger.info(
            "Creating GitHub repository",
            repo_name=request.name,
            private=request.private,
        )
        try:
            data = await self._request("POST", "/user/repos", request.model_dump())
        except GitHubResponseError as e:
            self._log_failure("create GitHub repository", e, repo_name=request.name)
            if e.status_code == 422:
                raise _conflict(f'Repository "{request.name}" already exists') from e
            if e.status_code == 401:
                raise RepositoryHostingError(
                    code="unauthorized", message="Invalid GitHub token", http_status=401
                ) from e
            raise _bad_request(f"GitHub API Error: {e.detail}") from e

        repo = self._parse(Repository, data)
        self.logger.info(
            "GitHub repository created successfully",
            repo_name=repo.name,
            repo_url=repo.html_url,
            default_branch=repo.default_branch,
        )
        return repo

    async def enable_pages(self, request: EnablePagesRequest) -> PagesSite:
        self.logger.info(
            "Enabling GitHub Pages",
            owner=request.owner,
            repo=request.repo,
            branch=request.branch,
            path=request.path,
        )
        try:
            data = await self._request(
                "POST",
                f"/repos/{request.owner}/{request.repo}/pages",
                {"source": {"branch": request.branch, "path": request.path}},
            )
        except GitHubResponseError as e:
            self._log_failure("enable GitHub Pages", e, owner=request.owner, repo=request.repo)
            if e.status_code == 404:
                raise _not_found(f'Repository "{request.owner}/{request.repo}" not found') from e
            if e.status_code == 409:
                raise _conflict("GitHub Pages already enabled for this repository") from e
            raise _bad_request(f"Failed to enable GitHub Pages: {e.detail}") from e

        pages = self._parse(PagesSite, data)
        self.logger.info("GitHub Pages enabled successfully", pages_url=pages.html_url)
        return pages

    async def get_pages_url(self, owner: str, repo: str) -> Optional[str]:
        """Published Pages URL, or None when Pages is not enabled."""
        try:
            data = await self._request("GET", f"/repos/{owner}/{repo}/pages")
        except GitHubResponseError as e:
            self.logger.debug(
                "GitHub Pages not found or not enabled",
                owner=owner,
                repo=repo,
                status=e.status_code,
            )
            return None
        return data.get("html_url") if isinstance(data, dict) else None

    async def create_file(self, request: CreateFileRequest) -> FileContent:
        self.logger.info(
            "Creating file in GitHub repository",
            owner=request.owner,
            repo=request.repo,
            path=request.path,
            content_length=len(request.content),
        )
        body = {
            "message": request.message or "Add file via API",
            "content": self._encode(request.content),
            "branch": request.branch,
        }
        try:
            data = await self._request(
                "PUT", f"/repos/{request.owner}/{request.repo}/contents/{request.path}", body
            )
        except GitHubResponseError as e:
            self._log_failure("create file", e, path=request.path, repo=request.repo)
            if e.status_code == 404:
                raise _not_found(f'Repository "{request.owner}/{request.repo}" not found') from e
            if e.status_code == 422:
                raise _conflict(f'File "{request.path}" already exists') from e
            raise _bad_request(f"Failed to create file: {e.detail}") from e

        return self._parse(FileContent, data.get("content") if isinstance(data, dict) else None)

    async def read_file(self, request: ReadFileRequest) -> FileResponse:
        params = {"ref": request.branch} if request.branch else None
        try:
            data = await self._request(
                "GET",
                f"/repos/{request.owner}/{request.repo}/contents/{request.path}",
                params=params,
            )
        except GitHubResponseError as e:
            self._log_failure("read file", e, path=request.path, repo=request.repo)
            if e.status_code == 404:
                raise _not_found(
                    f'File "{request.path}" not found in repository "{request.owner}/{request.repo}"'
                ) from e
            raise _bad_request(f"Failed to read file: {e.detail}") from e

        if isinstance(data, list):
            raise _bad_request(f'Path "{request.path}" is not a file')
        entry = self._parse(FileContent, data)
        if entry.type != "file":
            raise _bad_request(f'Path "{request.path}" is not a file')

        try:
            content = base64.b64decode(entry.content or "").decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise _bad_request("File is not UTF-8 text") from e
        self.logger.debug(
            "File read successfully from GitHub repository",
            path=entry.path,
            size=entry.size,
            sha=entry.sha,
        )
        return FileResponse(
            name=entry.name,
            path=entry.path,
            content=content,
            sha=entry.sha,
            size=entry.size,
            url=entry.html_url,
            download_url=entry.download_url,
            encoding=entry.encoding,
        )

    async def update_file(self, request: CreateFileRequest) -> FileContent:
        """Replace an existing file; the current sha is read first."""
        current = await self.read_file(
            ReadFileRequest(
                owner=request.owner, repo=request.repo, path=request.path, branch=request.branch
            )
        )
        self.logger.info(
            "Updating file in GitHub repository",
            owner=request.owner,
            repo=request.repo,
            path=request.path,
            sha=current.sha,
        )
        body = {
            "message": request.message or "Update file via API",
            "content": self._encode(request.content),
            "sha": current.sha,
            "branch": request.branch,
        }
        try:
            data = await self._request(
                "PUT", f"/repos/{request.owner}/{request.repo}/contents/{request.path}", body
            )
        except GitHubResponseError as e:
            self._log_failure("update file", e, path=request.path, repo=request.repo)
            if e.status_code == 404:
                raise _not_found(f'File "{request.path}" not found') from e
            if e.status_code in (409, 422):
                raise _conflict(f'File "{request.path}" was modified concurrently') from e
            raise _bad_request(f"Failed to update file: {e.detail}") from e

        return self._parse(FileContent, data.get("content") if isinstance(data, dict) else None)

    def _parse(self, model, data: Any):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            self.logger.error(
                "Unexpected GitHub API response shape",
                model=model.__name__,
                errors=e.errors(include_url=False),
            )
            raise _bad_request("Unexpected response from GitHub API") from e
