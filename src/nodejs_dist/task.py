"""
Download-and-verify task for a Node.js binary distribution archive.

Flow for one invocation:
    1. Resolve download URLs for the (version, operating system) pair
    2. Empty the output directory
    3. Download the archive and SHASUMS256.txt.asc (bounded, optionally concurrent)
    4. Load the trusted release signing keys
    5. Verify the checksum list signature (skipped in hash-only mode)
    6. Verify the archive's SHA-256 against the checksum list

The first failure stops the run. The returned outcome carries the original
error unchanged together with the step it happened in. Nothing is retried.
"""

import asyncio
import logging
import shutil
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import urlparse

import aiohttp

from config.config import NodeDistConfig
from core.download import BoundedDownloader, DownloadOutcome, DownloadTask
from core.errors.exceptions import PipelineError, wrap_exception
from core.logging import LogContext, generate_run_id, log_phase
from nodejs_dist.keys import TrustedKeySet, load_trusted_keys
from nodejs_dist.operating_system import OperatingSystem
from nodejs_dist.paths import NodeJsPaths, normalize_version, resolve_nodejs_paths
from nodejs_dist.shasums import load_shasums_file
from nodejs_dist.signature import SignatureVerification, SignatureVerifier, verify_file_hash

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    """Progress of a download-and-verify run."""

    IDLE = "idle"
    PATHS_RESOLVED = "paths_resolved"
    ARCHIVE_DOWNLOADED = "archive_downloaded"
    CHECKSUM_LIST_DOWNLOADED = "checksum_list_downloaded"
    KEYS_LOADED = "keys_loaded"
    SIGNATURE_VERIFIED = "signature_verified"
    HASH_VERIFIED = "hash_verified"
    FAILED = "failed"


class _StepFailed(Exception):
    def __init__(self, step: str, error: PipelineError):
        super().__init__(str(error))
        self.step = step
        self.error = error


@dataclass
class NodeJsDownloadOutcome:
    """
    Result of a download-and-verify run.

    Success case:
        success=True, state=HASH_VERIFIED, archive_path set

    Failure case:
        success=False, state=FAILED, error and failed_step set; files
        already downloaded are left in place for inspection
    """

    success: bool
    state: RunState
    paths: NodeJsPaths | None = None
    archive_path: Path | None = None
    shasums_path: Path | None = None
    error: PipelineError | None = None
    failed_step: str | None = None
    signature: SignatureVerification | None = None

    @property
    def error_message(self) -> str | None:
        return str(self.error) if self.error else None


def downloaded_file_path(
    output_directory: Path,
    nodejs_version: str,
    operating_system: OperatingSystem,
) -> Path:
    """Where a run for these inputs leaves the archive. No I/O."""
    paths = resolve_nodejs_paths(nodejs_version, operating_system)
    return Path(output_directory) / paths.download_file_name


class NodeJsArchiveDownloader:
    """
    Downloads a Node.js binary distribution archive and verifies it.

    Usage:
        async with NodeJsArchiveDownloader(os, "20.9.0", out_dir, config) as task:
            outcome = await task.run()

    The aiohttp session is created per run unless one is injected. A blank
    version raises ValueError here, so run() only reports PipelineErrors.
    """

    def __init__(
        self,
        operating_system: OperatingSystem,
        nodejs_version: str,
        output_directory: Path,
        settings: NodeDistConfig | None = None,
        session: aiohttp.ClientSession | None = None,
        trusted_keys: TrustedKeySet | None = None,
        run_id: str | None = None,
    ):
        self.operating_system = operating_system
        self.nodejs_version = normalize_version(nodejs_version)
        self.output_directory = Path(output_directory)
        self.settings = settings or NodeDistConfig(node_version=nodejs_version)
        self.run_id = run_id or generate_run_id()
        self.state = RunState.IDLE
        self.state_history: list[RunState] = [RunState.IDLE]

        self._session = session
        self._trusted_keys = trusted_keys
        self._downloader: BoundedDownloader | None = None

    async def __aenter__(self) -> "NodeJsArchiveDownloader":
        self._downloader = BoundedDownloader(session=self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._downloader is not None:
            downloader, self._downloader = self._downloader, None
            await downloader.aclose()

    def _transition(self, state: RunState) -> None:
        self.state = state
        self.state_history.append(state)
        logger.debug(f"State: {state.value}", extra={"state": state.value})

    async def run(self) -> NodeJsDownloadOutcome:
        """Run every step once; never raises for PipelineError failures."""
        if self.state is not RunState.IDLE:
            raise RuntimeError("NodeJsArchiveDownloader.run() can only be called once")

        outcome = NodeJsDownloadOutcome(success=False, state=RunState.IDLE)

        with LogContext(
            run_id=self.run_id,
            platform=str(self.operating_system),
            node_version=self.nodejs_version,
        ):
            start = time.perf_counter()
            try:
                if self._downloader is None:
                    async with self:
                        await self._run_steps(outcome)
                else:
                    await self._run_steps(outcome)
            except _StepFailed as failure:
                self._transition(RunState.FAILED)
                outcome.success = False
                outcome.error = failure.error
                outcome.failed_step = failure.step
                logger.debug(
                    f"Run failed in step {failure.step}: {failure.error}",
                    extra={
                        "failed_step": failure.step,
                        "error_category": failure.error.category.value,
                    },
                )
            else:
                outcome.success = True
                logger.info(
                    f"Verified {outcome.archive_path}",
                    extra={
                        "file_path": str(outcome.archive_path),
                        "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                    },
                )
            outcome.state = self.state

        return outcome

    async def _run_steps(self, outcome: NodeJsDownloadOutcome) -> None:
        settings = self.settings

        with log_phase(logger, "resolve_paths"):
            paths = self._step(
                "resolve_paths",
                resolve_nodejs_paths,
                self.nodejs_version,
                self.operating_system,
                settings.dist_base_url,
            )
        outcome.paths = paths
        self._transition(RunState.PATHS_RESOLVED)

        self._step("prepare_output_directory", self._prepare_output_directory)

        archive_task = self._download_task(
            paths.download_url, paths.download_file_name, settings.archive_max_bytes
        )
        shasums_task = self._download_task(
            paths.shasums_url, paths.shasums_file_name, settings.shasums_max_bytes
        )

        if settings.concurrent_downloads:
            with log_phase(logger, "download", level=logging.INFO):
                archive_result, shasums_result = await asyncio.gather(
                    self._downloader.download(archive_task),
                    self._downloader.download(shasums_task),
                )
        else:
            with log_phase(logger, "download_archive", level=logging.INFO):
                archive_result = await self._downloader.download(archive_task)
            shasums_result = None

        self._check_download("download_archive", archive_result)
        outcome.archive_path = archive_result.file_path
        self._transition(RunState.ARCHIVE_DOWNLOADED)

        if shasums_result is None:
            with log_phase(logger, "download_shasums", level=logging.INFO):
                shasums_result = await self._downloader.download(shasums_task)
        self._check_download("download_shasums", shasums_result)
        outcome.shasums_path = shasums_result.file_path
        self._transition(RunState.CHECKSUM_LIST_DOWNLOADED)

        with log_phase(logger, "load_keys"):
            trusted_keys = self._step("load_keys", self._load_trusted_keys)
        logger.info(
            f"Loaded {len(trusted_keys)} trusted signing keys from {trusted_keys.source}",
            extra={"num_certificates": len(trusted_keys), "key_list": trusted_keys.source},
        )
        self._transition(RunState.KEYS_LOADED)

        if settings.require_signature:
            with log_phase(logger, "verify_signature", level=logging.INFO):
                outcome.signature = await self._async_step(
                    "verify_signature",
                    self._verify_signature,
                    trusted_keys,
                    outcome.shasums_path,
                )
            logger.info(
                f"Checksum list signed by {outcome.signature.username or outcome.signature.fingerprint}",
                extra={
                    "signer_fingerprint": outcome.signature.fingerprint,
                    "signer_name": outcome.signature.username,
                },
            )
            self._transition(RunState.SIGNATURE_VERIFIED)
        else:
            logger.warning(
                "Signature verification disabled: only the archive hash is checked "
                "against an unauthenticated checksum list",
                extra={"file_name": paths.shasums_file_name},
            )

        checksums = self._step("parse_shasums", load_shasums_file, outcome.shasums_path)
        logger.debug(
            f"Loaded {len(checksums)} hashes from {paths.shasums_file_name}",
            extra={"num_hashes": len(checksums)},
        )

        with log_phase(logger, "verify_hash", file_name=paths.download_file_name):
            await self._async_step(
                "verify_hash",
                verify_file_hash,
                outcome.archive_path,
                checksums,
                paths.download_file_name,
                paths.shasums_url,
            )
        self._transition(RunState.HASH_VERIFIED)

    @staticmethod
    def _step(step: str, func, *args):
        try:
            return func(*args)
        except PipelineError as e:
            raise _StepFailed(step, e) from e

    @staticmethod
    async def _async_step(step: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except PipelineError as e:
            raise _StepFailed(step, e) from e

    @staticmethod
    def _check_download(step: str, result: DownloadOutcome) -> None:
        if not result.success:
            raise _StepFailed(step, result.error)

    def _prepare_output_directory(self) -> None:
        try:
            if self.output_directory.exists():
                logger.debug(
                    f"Deleting existing output directory: {self.output_directory}",
                    extra={"output_directory": str(self.output_directory)},
                )
                shutil.rmtree(self.output_directory)
            self.output_directory.mkdir(parents=True)
        except OSError as e:
            raise wrap_exception(
                e, context={"output_directory": str(self.output_directory)}
            ) from e

    def _download_task(self, url: str, file_name: str, max_bytes: int) -> DownloadTask:
        settings = self.settings
        allowed_domains = {d.lower() for d in settings.allowed_domains}
        mirror_host = urlparse(settings.dist_base_url).hostname
        if mirror_host:
            allowed_domains.add(mirror_host.lower())

        return DownloadTask(
            url=url,
            destination=self.output_directory / file_name,
            max_bytes=max_bytes,
            timeout=settings.timeout_seconds,
            sock_read_timeout=settings.sock_read_timeout_seconds,
            allowed_domains=allowed_domains,
            allow_localhost=settings.allow_localhost,
        )

    def _load_trusted_keys(self) -> TrustedKeySet:
        if self._trusted_keys is None:
            key_list = Path(self.settings.key_list) if self.settings.key_list else None
            self._trusted_keys = load_trusted_keys(key_list)
        return self._trusted_keys

    def _verify_signature(
        self, trusted_keys: TrustedKeySet, shasums_path: Path
    ) -> SignatureVerification:
        with SignatureVerifier(
            trusted_keys,
            gpg_binary=self.settings.gpg_binary,
            keyserver=self.settings.keyserver,
        ) as verifier:
            return verifier.verify_signature(shasums_path)


def download_and_verify(
    operating_system: OperatingSystem,
    nodejs_version: str,
    output_directory: Path,
    settings: NodeDistConfig | None = None,
    run_id: str | None = None,
) -> NodeJsDownloadOutcome:
    """Blocking entry point: run the task on a fresh event loop."""

    async def _run() -> NodeJsDownloadOutcome:
        async with NodeJsArchiveDownloader(
            operating_system, nodejs_version, output_directory, settings, run_id=run_id
        ) as task:
            return await task.run()

    return asyncio.run(_run())


__all__ = [
    "RunState",
    "NodeJsDownloadOutcome",
    "NodeJsArchiveDownloader",
    "download_and_verify",
    "downloaded_file_path",
]
