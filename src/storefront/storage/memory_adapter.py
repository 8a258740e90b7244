"""Configurable in-memory object storage for development and testing."""

from storefront.storage.port import ObjectStorage, UploadResult


class InMemoryObjectStorage(ObjectStorage):
    """Object storage held in a dict.

    Uploads and removals can be made to fail at runtime to exercise the
    fatal and best-effort paths around payment proofs.
    """

    def __init__(self, bucket: str = "payment-proofs") -> None:
        self.bucket = bucket
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.fail_uploads: bool = False
        self.fail_removals: bool = False
        self.calls: list[dict] = []

    def configure(self, fail_uploads: bool = False, fail_removals: bool = False) -> None:
        self.fail_uploads = fail_uploads
        self.fail_removals = fail_removals

    def upload(self, path: str, content: bytes, content_type: str) -> UploadResult:
        self.calls.append({"method": "upload", "path": path, "content_type": content_type})

        if self.fail_uploads:
            return UploadResult(success=False, failure_reason="Storage unavailable")
        if path in self.objects:
            return UploadResult(success=False, failure_reason=f"Object already exists: {path}")

        self.objects[path] = (content, content_type)
        return UploadResult(success=True, path=path)

    def remove(self, path: str) -> bool:
        self.calls.append({"method": "remove", "path": path})

        if self.fail_removals:
            return False
        return self.objects.pop(path, None) is not None

    def resolve_url(self, path: str) -> str | None:
        if path.startswith("http"):
            return path
        return f"memory://{self.bucket}/{path}"
