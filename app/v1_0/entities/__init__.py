from .identity_DTO import IdentityUser, AuthenticationDTO
from .upload_DTO import UploadDTO


__all__ = [
    "IdentityUser", "AuthenticationDTO",
    "UploadDTO",
]
