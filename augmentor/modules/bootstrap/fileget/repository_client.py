"""HTTP client fetching single artifacts from a Maven repository."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import httpx

from augmentor.modules.bootstrap.domain import ArtifactCoordinate
from augmentor.modules.bootstrap.util.exceptions import ArtifactDownloadError
from augmentor.settings import AugmentorSettings


class MavenRepositoryClient:
    """Download artifacts laid out as ``<base>/<group path>/<name>/<version>/<file>``."""

    def __init__(
        self,
        base_url: str,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.log = logging.getLogger(self.__class__.__name__)
        self._auth = (username, password) if username and password else None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    @classmethod
    def from_settings(
        cls, settings: AugmentorSettings, client: Optional[httpx.Client] = None
    ) -> Optional["MavenRepositoryClient"]:
        if not settings.repository_url:
            return None
        return cls(
            settings.repository_url,
            username=settings.repository_username,
            password=settings.repository_password,
            timeout=settings.repository_timeout,
            client=client,
        )

    def artifact_url(self, coords: ArtifactCoordinate) -> str:
        return f"{self.base_url}/{'/'.join(coords.path_segments)}"

    def exists(self, coords: ArtifactCoordinate) -> bool:
        try:
            response = self._client.head(self.artifact_url(coords), auth=self._auth)
        except httpx.HTTPError as exc:
            self.log.warning("Repository lookup failed for %s: %s", coords, exc)
            return False
        return response.status_code == 200

    def download(self, coords: ArtifactCoordinate, dest_path: Path, *, force: bool = False) -> Path:
        url = self.artifact_url(coords)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        if dest_path.exists() and not force:
            self.log.info("Reusing cached artifact %s -> %s", coords, dest_path)
            return dest_path

        self.log.info("Downloading artifact %s url=%s", coords, url)
        start_time = time.time()
        downloaded = 0
        tmp_path = dest_path.with_name(dest_path.name + ".part")
        try:
            with self._client.stream("GET", url, auth=self._auth) as response:
                response.raise_for_status()
                with open(tmp_path, "wb") as fh:
                    for chunk in response.iter_bytes(65536):
                        if not chunk:
                            continue
                        fh.write(chunk)
                        downloaded += len(chunk)
            tmp_path.replace(dest_path)
        except httpx.HTTPError as exc:
            tmp_path.unlink(missing_ok=True)
            raise ArtifactDownloadError(f"cannot download {coords} from {url}: {exc}") from exc

        elapsed = max(time.time() - start_time, 1e-3)
        self.log.info(
            "Downloaded artifact %s -> %s (%d bytes, %.2f MB/s, %.2fs)",
            coords,
            dest_path,
            downloaded,
            (downloaded / 1024 / 1024) / elapsed,
            elapsed,
        )
        return dest_path

    def close(self) -> None:
        self._client.close()
