import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

MediaKind = Literal["audio", "video", "image"]


def media_kind_for(mime_type: str) -> MediaKind:
    """Map a MIME type to the attachment kind stored on the record.

    Anything that is neither video nor image is stored as audio.
    """
    family = mime_type.split("/", 1)[0].lower()
    if family == "video":
        return "video"
    if family == "image":
        return "image"
    return "audio"


@dataclass(frozen=True)
class RawFile:
    """Caller-supplied capture file, consumed once by the orchestrator."""

    data: bytes
    mime_type: str
    name: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def kind(self) -> MediaKind:
        return media_kind_for(self.mime_type)

    @classmethod
    def from_path(cls, path: Path, mime_type: str | None = None) -> "RawFile":
        """Read a file from disk, guessing its MIME type from the extension."""
        if mime_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            mime_type = guessed or "application/octet-stream"
        return cls(data=path.read_bytes(), mime_type=mime_type, name=path.name)


@dataclass(frozen=True)
class ProcessedFile:
    """Output of compression or thumbnail derivation, ready for upload."""

    data: bytes
    mime_type: str
    name: str

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def passthrough(cls, file: RawFile) -> "ProcessedFile":
        return cls(data=file.data, mime_type=file.mime_type, name=file.name)
