"""
Fulfillment worker interface.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class FulfillmentRequest:
    """A single generation job for an authorized order."""
    order_id: str
    payer: str
    word: str

    def to_payload(self) -> Dict[str, Any]:
        return {'word': self.word}


@dataclass
class FulfillmentResult:
    """Worker response, passed through to the caller untouched."""
    payload: Dict[str, Any] = field(default_factory=dict)
    status_code: Optional[int] = None


class FulfillmentWorker(ABC):
    """
    Abstract base class for the service that generates vanity addresses.

    Implementations make exactly one attempt per call. The order is already
    marked used when ``dispatch`` runs, so retrying here could fulfill twice.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the worker client.

        Args:
            config: Worker-specific configuration (URL, timeout, etc.)
        """
        self.config = config

    @property
    @abstractmethod
    def worker_name(self) -> str:
        """Return the worker name (e.g., 'http')."""
        pass

    @abstractmethod
    def dispatch(self, job: FulfillmentRequest) -> FulfillmentResult:
        """
        Send the job to the worker.

        Args:
            job: Fulfillment request for an authorized order

        Returns:
            FulfillmentResult with the worker's structured response

        Raises:
            DispatchError: timeout, transport failure, worker rejection or
                unparseable response
        """
        pass
