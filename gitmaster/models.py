from pydantic import BaseModel, Field, NonNegativeInt
from typing import Literal, TypeAlias

FileStatus: TypeAlias = Literal["unmodified", "modified", "staged", "deleted", "added"]

class FileEntry(BaseModel):
    path: str
    content: str
    status: FileStatus = "unmodified"

FileStructure: TypeAlias = dict[str, FileEntry]

class Commit(BaseModel):
    hash: str
    parents: list[str] = Field(default_factory=list)
    message: str
    author: str
    timestamp: int  # milliseconds since the epoch
    tree: FileStructure = Field(default_factory=dict)

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

class Branch(BaseModel):
    name: str
    headCommitHash: str
    color: str

class HeadInfo(BaseModel):
    type: Literal["branch", "detached"]
    ref: str # branch name or commit hash

class RepoState(BaseModel):
    """Everything a repository owns. Field names double as the JSON snapshot keys."""

    commits: dict[str, Commit] = Field(default_factory=dict)
    branches: dict[str, Branch] = Field(default_factory=dict)
    tags: dict[str, str] = Field(default_factory=dict)
    HEAD: HeadInfo = Field(default_factory=lambda: HeadInfo(type="branch", ref="main"))
    stagingArea: FileStructure = Field(default_factory=dict)
    workingDirectory: FileStructure = Field(default_factory=dict)
    commandHistory: list[str] = Field(default_factory=list)
    lastOutput: str = ""
    # palette slot 0 belongs to the default branch
    colorIndex: NonNegativeInt = 1

class StatusReport(BaseModel):
    staged: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    untracked: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.staged or self.modified or self.untracked or self.deleted)

class MergeResult(BaseModel):
    success: bool
    conflict: bool = False
