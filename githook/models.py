"""
GitHook custom resource models.
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

API_GROUP = "tools.githook.dev"
API_VERSION = "v1alpha1"
KIND = "GitHook"
PLURAL = "githooks"


class KubeModel(BaseModel):
    """Base model speaking the camelCase JSON used by the API server."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class GitProvider(str, Enum):
    """Supported Git providers."""
    GITHUB = "github"
    GITLAB = "gitlab"
    GOGS = "gogs"


class GitEvent(str, Enum):
    """Canonical webhook event vocabulary shared by all providers."""
    CREATE = "create"
    DELETE = "delete"
    FORK = "fork"
    PUSH = "push"
    ISSUES = "issues"
    ISSUE_COMMENT = "issue_comment"
    PULL_REQUEST = "pull_request"
    RELEASE = "release"


class SecretKeySelector(KubeModel):
    name: str
    key: str


class SecretValueFromSource(KubeModel):
    secret_key_ref: SecretKeySelector = Field(
        ...,
        validation_alias=AliasChoices("secretKeyRef", "SecretKeyRef", "secret_key_ref"),
        serialization_alias="secretKeyRef",
    )


class OwnerReference(KubeModel):
    api_version: str
    kind: str
    name: str
    uid: str
    controller: Optional[bool] = None
    block_owner_deletion: Optional[bool] = None


class ObjectMeta(KubeModel):
    name: str
    namespace: str = "default"
    uid: Optional[str] = None
    generation: Optional[int] = None
    resource_version: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    finalizers: list[str] = Field(default_factory=list)
    deletion_timestamp: Optional[str] = None
    owner_references: list[OwnerReference] = Field(default_factory=list)


class GitHookSpec(KubeModel):
    """Desired state of a GitHook."""

    service_account_name: Optional[str] = Field(None, description="Service account of the receiver")
    project_url: str = Field(..., min_length=1, description="Git project URL")
    git_provider: str = Field(..., description="Git provider type")
    event_types: list[GitEvent] = Field(default_factory=list, description="Subscribed events")
    access_token: SecretValueFromSource = Field(..., description="Provider API token")
    secret_token: SecretValueFromSource = Field(..., description="Shared webhook secret")
    ssl_verify: bool = Field(False, description="Verify TLS when the provider calls the receiver")
    run_spec: Dict[str, Any] = Field(default_factory=dict, description="PipelineRun spec template")


class GitHookStatus(KubeModel):
    """Observed state of a GitHook."""

    id: str = Field("", description="Remote webhook identifier")


class GitHook(KubeModel):
    api_version: str = f"{API_GROUP}/{API_VERSION}"
    kind: str = KIND
    metadata: ObjectMeta
    spec: GitHookSpec
    status: GitHookStatus = Field(default_factory=GitHookStatus)

    @property
    def key(self) -> str:
        return f"{self.metadata.namespace}/{self.metadata.name}"

    @property
    def being_deleted(self) -> bool:
        return self.metadata.deletion_timestamp is not None

    def owner_reference(self) -> OwnerReference:
        """Controller owner reference pointing at this GitHook."""
        return OwnerReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.metadata.name,
            uid=self.metadata.uid or "",
            controller=True,
            block_owner_deletion=True,
        )
