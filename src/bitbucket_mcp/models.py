"""Bitbucket API response models.

Read-only mirrors of the fields the tools render. Unknown fields are ignored
and every field has a default, so a sparse response still parses.
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class BitbucketModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Link(BitbucketModel):
    href: str = ""


class Links(BitbucketModel):
    html: Link = Field(default_factory=Link)


class Page(BitbucketModel, Generic[T]):
    """First page of a paginated collection. `next` is never followed."""

    values: List[T] = Field(default_factory=list)
    page: Optional[int] = None
    pagelen: Optional[int] = None
    size: Optional[int] = None
    next: Optional[str] = None


class User(BitbucketModel):
    display_name: str = ""
    uuid: Optional[str] = None
    nickname: Optional[str] = None
    account_id: Optional[str] = None


class Author(BitbucketModel):
    raw: str = ""
    user: Optional[User] = None

    @property
    def name(self) -> str:
        """Linked account display name, falling back to the raw git author."""
        if self.user and self.user.display_name:
            return self.user.display_name
        return self.raw


class CommitRef(BitbucketModel):
    hash: str = ""


class Commit(BitbucketModel):
    hash: str = ""
    date: Optional[datetime] = None
    message: str = ""
    author: Author = Field(default_factory=Author)

    @property
    def summary(self) -> str:
        return self.message.split("\n", 1)[0]


class DetailedCommit(Commit):
    parents: List[CommitRef] = Field(default_factory=list)
    committer: Optional[Author] = None


class Repository(BitbucketModel):
    name: str = ""
    slug: Optional[str] = None
    full_name: str = ""
    description: Optional[str] = None
    created_on: Optional[datetime] = None
    updated_on: Optional[datetime] = None
    language: Optional[str] = None
    size: int = 0
    is_private: bool = False
    links: Links = Field(default_factory=Links)

    @property
    def path_slug(self) -> str:
        return self.slug or self.name


class RepositoryWithCommitInfo(Repository):
    commit_count: Optional[int] = None
    latest_commit_date: Optional[datetime] = None
    latest_commit_hash: Optional[str] = None
    latest_commit_message: Optional[str] = None
    latest_commit_author: Optional[str] = None


class Group(BitbucketModel):
    name: str = ""
    slug: Optional[str] = None


class BranchRestriction(BitbucketModel):
    id: Optional[int] = None
    kind: str = ""
    pattern: str = ""
    users: Optional[List[User]] = None
    groups: Optional[List[Group]] = None


class Project(BitbucketModel):
    key: str = ""
    name: str = ""
    description: Optional[str] = None
    is_private: bool = False
    created_on: Optional[datetime] = None
    updated_on: Optional[datetime] = None
    links: Links = Field(default_factory=Links)


class BranchName(BitbucketModel):
    name: str = ""


class PullRequestEndpoint(BitbucketModel):
    branch: BranchName = Field(default_factory=BranchName)


class PullRequest(BitbucketModel):
    id: Optional[int] = None
    title: str = ""
    description: Optional[str] = None
    state: str = ""
    author: User = Field(default_factory=User)
    source: PullRequestEndpoint = Field(default_factory=PullRequestEndpoint)
    destination: PullRequestEndpoint = Field(default_factory=PullRequestEndpoint)
    created_on: Optional[datetime] = None
    updated_on: Optional[datetime] = None
    links: Links = Field(default_factory=Links)


class Workspace(BitbucketModel):
    uuid: Optional[str] = None
    name: str = ""
    slug: str = ""
    is_private: bool = False
    created_on: Optional[datetime] = None
    updated_on: Optional[datetime] = None
