"""
Base resource interface.
"""

import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from storefront.services.client import RequestExecutor


class BaseResource(ABC):
    """
    Abstract base class for all domain resources.

    All resources should:
    - Use RequestExecutor for HTTP requests (caching, refresh, retry)
    - Invalidate their cache prefix after every successful write
    - Return the unwrapped JSON payload untouched
    """

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    @property
    @abstractmethod
    def prefix(self) -> str:
        """Resource path used for endpoints and cache invalidation."""
        ...

    async def _write(
        self,
        endpoint: str,
        method: str,
        body: Any = None,
        requires_auth: bool = True,
    ) -> Any:
        """Run a mutating JSON call and drop cached reads of this resource."""
        result = await self.executor.execute(
            endpoint, method, body, requires_auth=requires_auth, use_cache=False
        )
        await self.executor.invalidate(self.prefix)
        return result

    async def _upload(
        self,
        endpoint: str,
        method: str,
        fields: dict[str, Any],
        image: str | Path,
        field_name: str = "image",
    ) -> Any:
        """Run a mutating multipart call carrying one image file."""
        form = {key: str(value) for key, value in fields.items() if value is not None}
        result = await self.executor.upload(
            endpoint,
            fields=form,
            files={field_name: read_image(image)},
            method=method,
        )
        await self.executor.invalidate(self.prefix)
        return result


def read_image(image: str | Path) -> tuple[str, bytes, str]:
    """Load an image from a path or file:// URI as an httpx file tuple."""
    path = Path(str(image).removeprefix("file://"))
    content_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    return path.name, path.read_bytes(), content_type
