"""Local image cache and the resolver that fills it."""

import asyncio
import base64
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from cookbookconverter.ingest.connectors.base import ImageFetcher, ImageFetchError
from cookbookconverter.ingest.schemas import CanonicalRecipe
from cookbookconverter.logging_config import get_logger

logger = get_logger(__name__)


class ImageCache:
    """
    Directory of downloaded images, one file per image id.

    Files hold the base64 text of the image, which is what the bundles embed.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path(self, image_id: str) -> Path:
        return self.directory / image_id

    def exists(self, image_id: str) -> bool:
        return self.path(image_id).is_file()

    def read(self, image_id: str) -> str:
        """Return the stored base64 payload."""
        return self.path(image_id).read_text(encoding="ascii")

    def write(self, image_id: str, content: bytes) -> None:
        """Store raw image bytes; rewriting the same id is harmless."""
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path(image_id).write_text(base64.b64encode(content).decode("ascii"), encoding="ascii")


@dataclass
class ImageDownloadResult:
    """Outcome of one download pass."""

    requested: int = 0
    downloaded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class ImageResolver:
    """Works out which images are missing from the cache and downloads them."""

    DEFAULT_CONCURRENCY = 8

    def __init__(
        self,
        fetcher: ImageFetcher,
        cache: ImageCache,
        placeholder_marker: str | None = None,
        concurrency: int | None = None,
    ):
        self.fetcher = fetcher
        self.cache = cache
        self.placeholder_marker = placeholder_marker
        self.concurrency = max(1, concurrency or self.DEFAULT_CONCURRENCY)

    def is_placeholder(self, url: str) -> bool:
        return bool(self.placeholder_marker) and self.placeholder_marker in url

    def collect_jobs(self, recipes: Iterable[CanonicalRecipe]) -> dict[str, str]:
        """
        Map image id to URL for every image that still has to be fetched.

        Placeholders and already cached ids are skipped. Each id appears once,
        however many recipes share the image.
        """
        jobs: dict[str, str] = {}
        for recipe in recipes:
            for image in recipe.images:
                if image.id in jobs:
                    continue
                if self.is_placeholder(image.url):
                    continue
                if self.cache.exists(image.id):
                    continue
                jobs[image.id] = image.url
        return jobs

    async def _download_one(
        self,
        image_id: str,
        url: str,
        semaphore: asyncio.Semaphore,
        result: ImageDownloadResult,
    ) -> None:
        async with semaphore:
            try:
                response = await self.fetcher.fetch(url)
            except ImageFetchError as e:
                logger.warning(f"Failed to download {url} via {self.fetcher.name}: {e}")
                result.failed.append(image_id)
                return

        if not response.is_success:
            logger.warning(
                f"Got status code {response.status_code} for {response.url} ({self.fetcher.name})"
            )
            result.failed.append(image_id)
            return

        self.cache.write(image_id, response.content)
        result.downloaded.append(image_id)

    async def download(self, jobs: dict[str, str]) -> ImageDownloadResult:
        """Fetch all jobs concurrently; failures are logged and skipped."""
        result = ImageDownloadResult(requested=len(jobs))
        if not jobs:
            return result

        semaphore = asyncio.Semaphore(self.concurrency)
        await asyncio.gather(
            *(
                self._download_one(image_id, url, semaphore, result)
                for image_id, url in jobs.items()
            )
        )

        logger.info(
            f"Downloaded {len(result.downloaded)} of {result.requested} images"
            f" ({len(result.failed)} failed)"
        )
        return result

    async def resolve(self, recipes: Iterable[CanonicalRecipe]) -> ImageDownloadResult:
        """Collect and download every missing image of the given recipes."""
        jobs = self.collect_jobs(recipes)
        logger.info(f"Downloading {len(jobs)} images")
        return await self.download(jobs)
