"""Report data models: attachment descriptors, verdicts and reports."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from content_scanner.errors import MalformedDescriptorError

MXC_PREFIX = "mxc://"


class EncryptionKey(BaseModel):
    """JSON Web Key describing an attachment's AES key."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    alg: str
    ext: bool
    k: str
    key_ops: list[str]
    kty: str


class Hashes(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    sha256: str


class AttachmentDescriptor(BaseModel):
    """Caller-supplied reference to a (possibly encrypted) media file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str
    v: str | None = None
    key: EncryptionKey | None = None
    iv: str | None = None
    hashes: Hashes | None = None
    mimetype: str | None = None

    @field_validator("url")
    @classmethod
    def check_mxc_url(cls, value: str) -> str:
        server, _, media_id = value.removeprefix(MXC_PREFIX).partition("/")
        if not value.startswith(MXC_PREFIX) or not server or not media_id:
            raise ValueError("url must be of the form mxc://<server>/<media id>")
        return value

    @model_validator(mode="after")
    def key_requires_v_iv_and_hashes(self) -> AttachmentDescriptor:
        if self.key is not None and any(
            field is None for field in (self.v, self.iv, self.hashes)
        ):
            raise ValueError("v, iv and hashes are required when key is present")
        return self

    @classmethod
    def parse(cls, data: dict) -> AttachmentDescriptor:
        """Validate raw input, raising MalformedDescriptorError on failure."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise MalformedDescriptorError(
                f"Malformed file descriptor: {exc.errors()[0]['msg']}"
            ) from exc

    @property
    def encrypted(self) -> bool:
        return self.key is not None

    @property
    def media_path(self) -> str:
        """``<server>/<media id>`` part of the mxc URL."""
        return self.url[len(MXC_PREFIX) :]


@dataclass(frozen=True)
class ScanVerdict:
    """Immutable result of one scan, keyed by the descriptor fingerprint."""

    clean: bool
    info: str
    exit_code: int
    fingerprint: str


@dataclass(frozen=True)
class ScanReport:
    """What a secret redeems to."""

    clean: bool
    scanned: bool
    info: str
