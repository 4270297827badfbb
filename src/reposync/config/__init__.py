"""Configuration: project/settings files and downloader selection."""
from reposync.config.loader import load_downloader
from reposync.config.models import GitRepoConfig, GithubRepoConfig, LocalRepoConfig
from reposync.config.project import Project, Settings

__all__ = [
    "GitRepoConfig",
    "GithubRepoConfig",
    "LocalRepoConfig",
    "Project",
    "Settings",
    "load_downloader",
]
