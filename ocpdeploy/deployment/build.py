"""Application image build on OpenShift.

This module handles the binary build of the application image:
- Bundling the build output directory into a zip archive
- Starting a build of the application BuildConfig from that archive
- Following the build events until the build finishes
"""

from __future__ import annotations

import asyncio
import atexit
import zipfile
from pathlib import Path

from loguru import logger

from ocpdeploy.infra.k8s.controller import BuildPhase, ClusterController
from ocpdeploy.utils.console_like import ConsoleLike

from .errors import BuildFailedError, ClusterError, DeploymentTimeoutError


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.debug(f"Could not remove {path}: {exc}")


def package_directory(source: Path, archive: Path) -> Path:
    """Zip `source` into `archive`, replacing any previous archive.

    The archive is scheduled for deletion when the interpreter exits. When the
    archive lives inside `source` it is left out of itself.

    Returns:
        Path to the created archive
    """
    archive = archive.resolve()
    if archive.exists():
        archive.unlink()
    atexit.register(_remove_quietly, archive)

    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path in sorted(source.rglob("*")):
            if path.resolve() == archive:
                continue
            zf.write(path, path.relative_to(source).as_posix())
    return archive


class BuildCoordinator:
    """Runs the binary build of the application image.

    Attributes:
        controller: Cluster controller
        console: Output for user-facing notices
        namespace: Target namespace
        timeout: Optional bound on the build wait in seconds (None: unbounded)
    """

    def __init__(
        self,
        controller: ClusterController,
        console: ConsoleLike,
        namespace: str,
        timeout: float | None = None,
    ) -> None:
        self.controller = controller
        self.console = console
        self.namespace = namespace
        self.timeout = timeout

    async def run(self, build_config: str, source: Path, archive: Path) -> str:
        """Package, submit and await a build.

        Returns:
            Name of the completed build
        """
        package_directory(source, archive)
        build_name = await self.submit(build_config, archive)
        await self.await_build(build_name)
        return build_name

    async def submit(self, build_config: str, archive: Path) -> str:
        """Start a build of `build_config` from the archive."""
        self.console.info(
            "Creating and starting application image build on OpenShift "
            "(this can take up to few minutes)..."
        )
        return await self.controller.instantiate_binary_build(
            build_config, archive, self.namespace
        )

    async def await_build(self, build_name: str) -> None:
        """Block until the build completes.

        Raises:
            BuildFailedError: If the build ends Failed, Error or Cancelled
            ClusterError: If the event stream ends before the build finishes
            DeploymentTimeoutError: If a timeout is set and exceeded
        """
        if self.timeout is None:
            await self._follow(build_name)
            return
        try:
            await asyncio.wait_for(self._follow(build_name), timeout=self.timeout)
        except TimeoutError:
            raise DeploymentTimeoutError(
                f"Timeout waiting for build {build_name}",
                timeout=self.timeout,
                details=f"Follow the build with: oc logs -f build/{build_name} -n {self.namespace}",
            ) from None

    async def _follow(self, build_name: str) -> None:
        async with self.controller.watch_build(build_name, self.namespace) as events:
            async for event in events:
                if event.phase is BuildPhase.RUNNING:
                    self.console.info("Build is running...")
                elif event.phase is BuildPhase.COMPLETE:
                    self.console.ok("Build is complete.")
                    return
                elif event.phase.is_terminal:
                    raise BuildFailedError(
                        build_name,
                        event.phase.value,
                        details=event.message
                        or f"Inspect the build with: oc logs build/{build_name} -n {self.namespace}",
                    )
                else:
                    logger.debug(f"Build {build_name} is {event.phase.value}")
        raise ClusterError(
            f"Event stream for build {build_name} closed before the build finished"
        )
