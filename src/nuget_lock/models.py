"""Data models for NuGet lock file updates."""

from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from nuget_lock.config import UpdateArtifactsConfig


class Dependency(BaseModel):
    """A dependency that was changed in the manifest."""
    dep_name: str
    current_value: Optional[str] = None
    new_value: Optional[str] = None


class UpdateArtifact(BaseModel):
    """Input for a lock file update of a single project file."""
    package_file_name: str
    new_package_file_content: str
    config: UpdateArtifactsConfig = Field(default_factory=UpdateArtifactsConfig)
    updated_deps: List[Dependency] = Field(default_factory=list)


class Registry(BaseModel):
    """A NuGet package source."""
    url: str
    name: Optional[str] = None


class RegistryInfo(BaseModel):
    """Parsed registry URL."""
    feed_url: str
    protocol_version: int = 2


class HostCredentials(BaseModel):
    """Credentials resolved for a host."""
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.username and self.password)


class File(BaseModel):
    """A file in the working tree; contents is None when the file is unreadable."""
    name: str
    contents: Optional[str] = None


class ArtifactError(BaseModel):
    """Failure to regenerate a lock file."""
    lock_file: str
    stderr: str


class UpdateArtifactsResult(BaseModel):
    """One entry of an update result: either an updated file or an error."""
    file: Optional[File] = None
    artifact_error: Optional[ArtifactError] = None

    @model_validator(mode="after")
    def check_exactly_one(self) -> "UpdateArtifactsResult":
        if (self.file is None) == (self.artifact_error is None):
            raise ValueError("Exactly one of 'file' or 'artifact_error' must be set")
        return self
