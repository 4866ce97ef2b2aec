"""Image operations, including two-stage size enrichment.

``image list`` is cheap but carries no usable size. The real size lives in
``image inspect`` per platform variant, so sizes are fetched per image in a
second stage that never delays the base list.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable, Sequence

from container_manager.errors import ContainerManagerError
from container_manager.models import ImageRecord
from container_manager.services.base import CommandService
from container_manager.utils.shell import join_command, mount_flag
from container_manager.utils.validation import validate_key, validate_mount_path

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM_OS = "linux"
DEFAULT_PLATFORM_ARCH = "arm64"


class ImageService(CommandService):
    """Façade over ``container image`` and ``container run``."""

    async def list(self) -> list[ImageRecord]:
        """List images without sizes."""
        stdout = await self.output("image", "list", "--format", "json")
        return self.decoder.decode(stdout, ImageRecord)

    async def fetch_size(
        self,
        reference: str,
        os: str = DEFAULT_PLATFORM_OS,
        architecture: str = DEFAULT_PLATFORM_ARCH,
    ) -> int | None:
        """Fetch one image's platform variant size via ``image inspect``."""
        stdout = await self.output("image", "inspect", validate_key(reference, "image"))
        return self.decoder.decode_variant_size(stdout, os=os, architecture=architecture)

    async def enrich(
        self,
        images: Iterable[ImageRecord],
        os: str = DEFAULT_PLATFORM_OS,
        architecture: str = DEFAULT_PLATFORM_ARCH,
    ) -> AsyncIterator[ImageRecord]:
        """Yield size-enriched copies as each inspect call completes.

        Fetches run concurrently and arrive in completion order. A failed
        fetch yields the record unchanged (size stays None).
        """

        async def _enrich_one(image: ImageRecord) -> ImageRecord:
            try:
                size = await self.fetch_size(image.reference, os=os, architecture=architecture)
            except ContainerManagerError as e:
                logger.warning("Size lookup failed for %s: %s", image.reference, e)
                return image
            return image.with_size(size)

        tasks = [asyncio.create_task(_enrich_one(image)) for image in images]
        try:
            for next_done in asyncio.as_completed(tasks):
                yield await next_done
        finally:
            for task in tasks:
                task.cancel()
            # Reap leftovers when the consumer stops early
            await asyncio.gather(*tasks, return_exceptions=True)

    async def list_with_sizes(
        self,
        os: str = DEFAULT_PLATFORM_OS,
        architecture: str = DEFAULT_PLATFORM_ARCH,
    ) -> list[ImageRecord]:
        """List images and merge in sizes, preserving list order."""
        images = await self.list()
        enriched = {
            image.reference: image
            async for image in self.enrich(images, os=os, architecture=architecture)
        }
        return [enriched.get(image.reference, image) for image in images]

    async def get(self, display_name: str) -> ImageRecord | None:
        """Find an image by ``repository:tag`` or full reference."""
        images = await self.list()
        for image in images:
            if display_name in (image.display_name, image.reference):
                return image
        return None

    async def inspect(self, reference: str) -> str:
        """Return the image detail dump verbatim."""
        return await self.output("image", "inspect", validate_key(reference, "image"))

    async def pull(self, reference: str) -> None:
        """Pull an image from its registry."""
        reference = validate_key(reference, "image")
        logger.info("Pulling image %s", reference)
        await self.execute("image", "pull", reference)
        logger.info("Pulled image %s", reference)

    async def remove(self, reference: str) -> None:
        """Delete a local image."""
        await self.execute("image", "delete", validate_key(reference, "image"))
        logger.info("Removed image %s", reference)

    async def tag(self, source: str, target: str) -> None:
        """Create ``target`` as a new reference to ``source``."""
        await self.execute(
            "image",
            "tag",
            validate_key(source, "image"),
            validate_key(target, "image"),
        )
        logger.info("Tagged image %s as %s", source, target)

    async def run(self, reference: str, name: str | None = None) -> str:
        """Start a detached container from an image.

        Args:
            reference: Image reference
            name: Optional container name

        Returns:
            Trimmed CLI output (usually the new container id)
        """
        args = ["run", "-d"]
        if name and name.strip():
            args.extend(["--name", validate_key(name, "container")])
        args.append(validate_key(reference, "image"))
        stdout = await self.output(*args)
        logger.info("Started container from %s", reference)
        return stdout.strip()

    def build_run_command(
        self,
        reference: str,
        name: str | None = None,
        mounts: Sequence[str] = (),
        shell: str = "/bin/sh",
    ) -> str:
        """Render an interactive ``run`` command line for copy/paste.

        Args:
            reference: Image reference
            name: Optional container name
            mounts: Host paths bind-mounted at the same path
            shell: Command to run inside the container

        Returns:
            Shell-quoted command string
        """
        argv = [self.config.cli_path, "run", "-it"]
        if name and name.strip():
            argv.extend(["--name", validate_key(name, "container")])
        for path in mounts:
            argv.extend(["-v", mount_flag(validate_mount_path(path))])
        argv.append(validate_key(reference, "image"))
        argv.append(shell)
        return join_command(argv)
