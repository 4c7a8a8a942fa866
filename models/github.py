"""Repository hosting (GitHub REST) models."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class RepositoryOwner(BaseModel):
    login: str
    id: int
    avatar_url: str


class Repository(BaseModel):
    """Subset of the repository resource returned by ``POST /user/repos``."""

    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    private: bool
    html_url: str
    clone_url: str
    default_branch: str
    created_at: str
    updated_at: str
    owner: RepositoryOwner

    model_config = ConfigDict(extra="ignore")


class PagesSource(BaseModel):
    branch: str
    path: str


class PagesSite(BaseModel):
    """GitHub Pages site for a repository."""

    url: str
    status: Optional[str] = None
    cname: Optional[str] = None
    html_url: str
    source: PagesSource

    model_config = ConfigDict(extra="ignore")


class FileContent(BaseModel):
    """Contents API entry; ``content`` is base64 when returned by a read."""

    name: str
    path: str
    sha: str
    size: int
    url: str
    html_url: str
    git_url: str
    download_url: Optional[str] = None
    type: Literal["file", "dir"]
    content: Optional[str] = None
    encoding: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class FileResponse(BaseModel):
    """Decoded file returned to the agent."""

    name: str
    path: str
    content: str
    sha: str
    size: int
    url: str
    download_url: Optional[str] = None
    encoding: Optional[str] = None


class CreateRepoRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Repository name")
    description: str = ""
    private: bool = False
    auto_init: bool = True


class CreateFileRequest(BaseModel):
    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    content: str
    message: Optional[str] = None
    branch: str = "main"


class ReadFileRequest(BaseModel):
    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    branch: Optional[str] = None


class EnablePagesRequest(BaseModel):
    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)
    branch: str = "main"
    path: str = "/"
