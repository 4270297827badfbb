"""reposync - keep local working copies of dependency repos in sync."""

__version__ = "0.1.0"
