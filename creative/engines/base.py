"""Abstract base class for render engine adapters"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from enum import Enum

from creative.models.engine import EngineDescriptor
from creative.models.render_plan import RenderPlan

ProgressCallback = Callable[[float], None]


class EngineStatus(Enum):
    COMPLETED = "completed"
    QUEUED = "queued"
    FAILED = "failed"


class EngineErrorCode(Enum):
    """Failure classes reported by adapters and the router"""
    TIMEOUT = "TIMEOUT"
    POLL_EXHAUSTED = "POLL_EXHAUSTED"
    TRANSIENT = "TRANSIENT"
    NETWORK = "NETWORK"
    ENGINE_ERROR = "ENGINE_ERROR"
    INVALID_OUTPUT = "INVALID_OUTPUT"
    NO_ADAPTER = "NO_ADAPTER"
    NOT_INSTALLED = "NOT_INSTALLED"

    @property
    def transient(self) -> bool:
        return self in (
            EngineErrorCode.TIMEOUT,
            EngineErrorCode.POLL_EXHAUSTED,
            EngineErrorCode.TRANSIENT,
            EngineErrorCode.NETWORK,
        )


class EngineError(Exception):
    """Raised by adapters for a classified engine failure."""

    def __init__(self, message: str, code: EngineErrorCode = EngineErrorCode.ENGINE_ERROR):
        super().__init__(message)
        self.code = code

    @property
    def transient(self) -> bool:
        return self.code.transient


@dataclass
class EngineResult:
    """Result from one engine call"""
    status: EngineStatus
    output_ref: Optional[str] = None
    job_ref: Optional[str] = None
    error_code: Optional[EngineErrorCode] = None
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}

    @property
    def success(self) -> bool:
        return self.status == EngineStatus.COMPLETED

    @property
    def transient(self) -> bool:
        return self.error_code is not None and self.error_code.transient

    @classmethod
    def completed(cls, output_ref: str, **metadata) -> "EngineResult":
        return cls(status=EngineStatus.COMPLETED, output_ref=output_ref, metadata=metadata)

    @classmethod
    def queued(cls, job_ref: str, **metadata) -> "EngineResult":
        return cls(status=EngineStatus.QUEUED, job_ref=job_ref, metadata=metadata)

    @classmethod
    def failed(cls, code: EngineErrorCode, message: str, **metadata) -> "EngineResult":
        return cls(
            status=EngineStatus.FAILED,
            error_code=code,
            error_message=message,
            metadata=metadata,
        )


class RenderEngine(ABC):
    """
    Abstract base class for render engines.

    The router treats every engine the same through this interface, whether
    it is a local process or a remote service.
    """

    def __init__(self, descriptor: EngineDescriptor):
        self.descriptor = descriptor

    @property
    def engine_id(self) -> str:
        return self.descriptor.engine_id

    @abstractmethod
    async def execute(
        self,
        plan: RenderPlan,
        source_url: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> EngineResult:
        """
        Start rendering a plan.

        Args:
            plan: Compiled render plan
            source_url: Source media; defaults to plan.source_url
            progress: Called with 0-100 as work advances

        Returns:
            EngineResult that is completed, failed, or queued with a job_ref
        """
        pass

    @abstractmethod
    async def check_status(self, job_ref: str) -> EngineResult:
        """
        Poll a queued job.

        Returns:
            EngineResult; queued again while the job is still running
        """
        pass

    async def aclose(self) -> None:
        """Release any held resources"""
        return None
