"""Validated deployment settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ocpdeploy.infra.constants import DEFAULT_CONSTANTS


class DeploySettings(BaseModel):
    """Settings shared by every deployment run.

    Attributes:
        namespace: Target namespace; the kubeconfig context namespace when unset
        builder_image: S2I builder image used by the application BuildConfig
        archive_path: Where the build output archive is written
        rollout_timeout: Seconds to wait for the application to become ready
        rollout_poll_interval: Seconds between readiness checks
        build_timeout: Seconds to wait for the image build; unbounded when unset
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    namespace: str | None = None
    builder_image: str = DEFAULT_CONSTANTS.DEFAULT_BUILDER_IMAGE
    archive_path: Path = Path(DEFAULT_CONSTANTS.DEFAULT_ARCHIVE_NAME)
    rollout_timeout: float = Field(default=DEFAULT_CONSTANTS.ROLLOUT_TIMEOUT, gt=0)
    rollout_poll_interval: float = Field(
        default=DEFAULT_CONSTANTS.ROLLOUT_POLL_INTERVAL, gt=0
    )
    build_timeout: float | None = Field(default=None, gt=0)

    @field_validator("namespace", "build_timeout", mode="before")
    @classmethod
    def _empty_as_none(cls, value: object) -> object:
        # Unset ${VAR:-} substitutions arrive as empty strings
        if isinstance(value, str) and not value.strip():
            return None
        return value
