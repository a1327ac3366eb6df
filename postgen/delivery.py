"""
DeliveryPipeline - Hands rendered slides to the user.

State machine per request:

    IDLE -> RENDERING -> DELIVERING -> NATIVE_SHARE --------> DONE
                                    \\        | (failure)
                                     \\       v
                                      SEQUENTIAL_DOWNLOAD -> DONE

Any unexpected failure, task cancellation included, ends in FAILED. Nothing
is retried: recovery means moving on to the next strategy, never repeating
the same one.

Native share sends every file in one request. Cancelling the share sheet is
a normal outcome and does not trigger the download fallback. Downloads run
strictly in slide order with a pause between them, since mobile browsers
silently drop download triggers that arrive too close together.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional

from .config import Settings, get_settings
from .exceptions import PipelineBusy, UnknownFormat
from .generator import SlideGenerator
from .models import RenderedAsset, RenderInput
from .targets import (
    DirectoryDownloadSink,
    DownloadSink,
    ShareCancelled,
    ShareFile,
    ShareTarget,
    UnsupportedShareTarget,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_NAME = "social_post"
DOWNLOAD_FAILED_NOTICE = "Error exporting images. Please try again."


class PipelineState(Enum):
    IDLE = "idle"
    RENDERING = "rendering"
    DELIVERING = "delivering"
    NATIVE_SHARE = "native_share"
    SEQUENTIAL_DOWNLOAD = "sequential_download"
    DONE = "done"
    FAILED = "failed"


class DeliveryMethod(Enum):
    NATIVE_SHARE = "native_share"
    DOWNLOAD = "download"


class DeliveryOutcome(Enum):
    SHARED = "shared"
    CANCELLED = "cancelled"  # user closed the share sheet
    DOWNLOADED = "downloaded"
    FAILED = "failed"


ALLOWED_TRANSITIONS: Dict[PipelineState, FrozenSet[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.RENDERING, PipelineState.DELIVERING}),
    PipelineState.RENDERING: frozenset({PipelineState.DELIVERING, PipelineState.FAILED}),
    PipelineState.DELIVERING: frozenset({
        PipelineState.NATIVE_SHARE, PipelineState.SEQUENTIAL_DOWNLOAD, PipelineState.FAILED,
    }),
    PipelineState.NATIVE_SHARE: frozenset({
        PipelineState.DONE, PipelineState.SEQUENTIAL_DOWNLOAD, PipelineState.FAILED,
    }),
    PipelineState.SEQUENTIAL_DOWNLOAD: frozenset({PipelineState.DONE, PipelineState.FAILED}),
    PipelineState.DONE: frozenset({PipelineState.IDLE}),
    PipelineState.FAILED: frozenset({PipelineState.IDLE}),
}

BUSY_STATES = frozenset({
    PipelineState.RENDERING,
    PipelineState.DELIVERING,
    PipelineState.NATIVE_SHARE,
    PipelineState.SEQUENTIAL_DOWNLOAD,
})


@dataclass
class DeliveryResult:
    """Final state of one request."""
    state: PipelineState
    outcome: DeliveryOutcome
    method: Optional[DeliveryMethod] = None
    delivered: List[str] = field(default_factory=list)  # filenames or saved paths
    notice: Optional[str] = None  # user-facing message, only on failure


def sanitize_filename(title: Optional[str]) -> str:
    """
    Turn a headline into a safe base filename.

    Case-folds and replaces every character outside [a-z0-9_] with "_".

    Examples:
        >>> sanitize_filename("Breaking News!")
        'breaking_news_'
        >>> sanitize_filename("")
        'social_post'
    """
    cleaned = (title or "").strip().casefold()
    if not cleaned:
        return DEFAULT_BASE_NAME
    return re.sub(r"[^a-z0-9_]", "_", cleaned)


class DeliveryPipeline:
    """
    Renders a request and delivers the resulting images.

    Only one request may be in flight; starting another while rendering or
    delivering raises PipelineBusy.
    """

    def __init__(
        self,
        generator: Optional[SlideGenerator] = None,
        share_target: Optional[ShareTarget] = None,
        download_sink: Optional[DownloadSink] = None,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize pipeline.

        Args:
            generator: Slide generator used by run()
            share_target: Native share surface (none available if None)
            download_sink: Fallback download back-end (download_dir if None)
            settings: Runtime settings (download delay, share text)
            sleep: Awaitable used for the inter-download pause
        """
        self.settings = settings or get_settings()
        self.generator = generator or SlideGenerator(settings=self.settings)
        self.share_target = share_target or UnsupportedShareTarget()
        self.download_sink = download_sink or DirectoryDownloadSink(self.settings.download_dir)
        self._sleep = sleep
        self._state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state in BUSY_STATES

    def _transition(self, new_state: PipelineState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self._state]:
            raise RuntimeError(f"Invalid pipeline transition {self._state.value} -> {new_state.value}")
        logger.debug(f"Pipeline {self._state.value} -> {new_state.value}")
        self._state = new_state
        self.history.append(new_state)

    def _begin(self) -> None:
        if self.busy:
            raise PipelineBusy(f"Pipeline is {self._state.value}, wait for the current request")
        if self._state is not PipelineState.IDLE:
            self._transition(PipelineState.IDLE)
        self.history = [PipelineState.IDLE]

    async def run(self, render_input: RenderInput) -> DeliveryResult:
        """
        Render every slide of the request, then deliver them.

        Args:
            render_input: User settings snapshot

        Returns:
            DeliveryResult describing how (and whether) files reached the user

        Raises:
            PipelineBusy: If another request is in flight
            UnknownFormat: If the format is not in the format table
        """
        self._begin()
        try:
            self._transition(PipelineState.RENDERING)
            try:
                assets = await self.generator.generate(render_input)
            except UnknownFormat:
                self._transition(PipelineState.FAILED)
                raise
            except Exception as e:
                logger.exception(f"Rendering failed: {e}")
                return self._fail()

            self._transition(PipelineState.DELIVERING)
            return await self._deliver(assets, sanitize_filename(render_input.title))
        except BaseException:
            self._abort()
            raise

    async def deliver(self, assets: List[RenderedAsset], base_name: Optional[str] = None) -> DeliveryResult:
        """
        Deliver already rendered slides.

        Args:
            assets: Rendered slides in order
            base_name: Raw title used for filenames (sanitized here)

        Returns:
            DeliveryResult
        """
        self._begin()
        try:
            self._transition(PipelineState.DELIVERING)
            return await self._deliver(assets, sanitize_filename(base_name))
        except BaseException:
            self._abort()
            raise

    async def _deliver(self, assets: List[RenderedAsset], base_name: str) -> DeliveryResult:
        try:
            return await self._share_or_download(assets, base_name)
        except Exception as e:
            logger.exception(f"Delivery failed in state {self._state.value}: {e}")
            return self._fail()

    async def _share_or_download(self, assets: List[RenderedAsset], base_name: str) -> DeliveryResult:
        files = [ShareFile(asset.filename(base_name), asset.image_data, asset.mime_type) for asset in assets]

        if files and self.share_target.can_share(files):
            self._transition(PipelineState.NATIVE_SHARE)
            try:
                await self.share_target.share(files, self.settings.share_title, self.settings.share_text)
            except ShareCancelled:
                logger.info("Share sheet dismissed by user")
                return self._finish(DeliveryOutcome.CANCELLED, DeliveryMethod.NATIVE_SHARE)
            except Exception as e:
                logger.warning(f"Native share via {self.share_target.name} failed, falling back to downloads: {e}")
            else:
                logger.info(f"Shared {len(files)} file(s) via {self.share_target.name}")
                return self._finish(
                    DeliveryOutcome.SHARED,
                    DeliveryMethod.NATIVE_SHARE,
                    delivered=[f.filename for f in files],
                )
        else:
            logger.info("Native multi-file share unavailable, downloading sequentially")

        self._transition(PipelineState.SEQUENTIAL_DOWNLOAD)
        return await self._download_all(files)

    async def _download_all(self, files: List[ShareFile]) -> DeliveryResult:
        delivered = []
        delay = self.settings.download_delay

        for index, file in enumerate(files):
            handle = None
            try:
                if index > 0:
                    await self._sleep(delay)
                handle = await self.download_sink.materialize(file.data, file.filename)
                delivered.append(await self.download_sink.trigger(handle))
            except Exception as e:
                logger.error(f"Download of {file.filename} failed: {e}")
                return self._fail(DeliveryMethod.DOWNLOAD, delivered)
            finally:
                if handle is not None:
                    await self._release(handle)

        logger.info(f"Downloaded {len(delivered)} file(s)")
        return self._finish(DeliveryOutcome.DOWNLOADED, DeliveryMethod.DOWNLOAD, delivered=delivered)

    async def _release(self, handle) -> None:
        try:
            await self.download_sink.release(handle)
        except Exception as e:
            logger.warning(f"Could not release download handle for {handle.filename}: {e}")

    def _fail(
        self,
        method: Optional[DeliveryMethod] = None,
        delivered: Optional[List[str]] = None,
    ) -> DeliveryResult:
        if self.busy:
            self._transition(PipelineState.FAILED)
        return DeliveryResult(
            state=self._state,
            outcome=DeliveryOutcome.FAILED,
            method=method,
            delivered=delivered or [],
            notice=DOWNLOAD_FAILED_NOTICE,
        )

    def _abort(self) -> None:
        # Cancellation or an error escaping a step must not leave the pipeline busy
        if self.busy:
            logger.warning(f"Request aborted in state {self._state.value}")
            self._transition(PipelineState.FAILED)

    def _finish(
        self,
        outcome: DeliveryOutcome,
        method: DeliveryMethod,
        delivered: Optional[List[str]] = None,
    ) -> DeliveryResult:
        self._transition(PipelineState.DONE)
        return DeliveryResult(
            state=self._state,
            outcome=outcome,
            method=method,
            delivered=delivered or [],
        )
