"""Core types shared by all reposync modules."""
