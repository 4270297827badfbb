"""Downloader variants: github, generic git remote, local directory."""
from reposync.downloader.base import PRIMARY_BRANCH, Downloader
from reposync.downloader.cache import FetchCache
from reposync.downloader.git_remote import GitDownloader
from reposync.downloader.github import GithubDownloader
from reposync.downloader.local import LocalDownloader

__all__ = [
    "PRIMARY_BRANCH",
    "Downloader",
    "FetchCache",
    "GitDownloader",
    "GithubDownloader",
    "LocalDownloader",
]
