"""Pydantic models for config types."""

from pydantic import BaseModel, Field

class RepoConfig(BaseModel):
    """Repository configuration."""
    remote: str = "origin"
    default_branch: str = "main"

    class Config:
        """Pydantic config."""
        extra = "allow"

class UserConfig(BaseModel):
    """User configuration."""
    log_git_commands: bool = False
    confirm_purge: bool = True

    class Config:
        """Pydantic config."""
        extra = "allow"

class TreeConfig(BaseModel):
    """How `show-tree` draws nesting."""
    indent: int = Field(default=2, ge=0)
    connector: str = "+-- "
    current_marker: str = "* "

    class Config:
        """Pydantic config."""
        extra = "allow"

class GitExtConfig(BaseModel):
    """Full gitext configuration."""
    repo: RepoConfig = Field(default_factory=RepoConfig)
    user: UserConfig = Field(default_factory=UserConfig)
    tree: TreeConfig = Field(default_factory=TreeConfig)

    class Config:
        """Pydantic config."""
        extra = "allow"
