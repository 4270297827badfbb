"""Repository entry models for the project file."""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RepoConfig(BaseModel):
    """Fields common to every repository entry."""

    model_config = ConfigDict(extra="ignore")

    ref: str = Field(default="master", description="Branch, tag, or commit to track")


class GithubRepoConfig(RepoConfig):
    """Repository hosted on GitHub or a compatible server."""

    type: Literal["github"] = "github"
    server: str = Field(default="", description="Host name; github.com when empty")
    user: str = Field(default="", description="Owner of the repository")
    repo: str = Field(default="", description="Repository name without .git")
    login: str = Field(default="", description="Login for private repos")
    password: str = Field(default="", description="Password or token for private repos")
    password_env: str = Field(
        default="",
        description="Environment variable holding the password; used if password is empty",
    )

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "type": "github",
                "user": "acme",
                "repo": "widgets",
                "ref": "v1.0",
                "login": "ci-bot",
                "password_env": "WIDGETS_TOKEN",
            }
        },
    )


class GitRepoConfig(RepoConfig):
    """Repository reachable at an arbitrary git URL."""

    type: Literal["git"] = "git"
    url: str = Field(..., min_length=1, description="Clone URL, used verbatim")


class LocalRepoConfig(RepoConfig):
    """Repository copied from a directory on the local filesystem."""

    type: Literal["local"] = "local"
    path: str = Field(..., min_length=1, description="Directory containing the repository")
