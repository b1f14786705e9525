from dataclasses import dataclass

@dataclass(frozen=True, slots=True)
class UploadDTO:
    """A file received in a multipart request, fully read into memory."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)
