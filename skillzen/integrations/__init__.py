from .errors import ResumeVendorError, UpstreamServiceError

__all__ = ["UpstreamServiceError", "ResumeVendorError"]
