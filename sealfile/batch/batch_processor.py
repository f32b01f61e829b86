"""
Concurrent Batch Runner

Applies one single-file operation to many items with bounded
parallelism. The executor's worker count is the admission gate: at most
`concurrency` operations run at once, the rest wait their turn.

Results come back in input order whatever the completion order, and one
item's exception is stored in its own slot without touching siblings.
No timeouts and no retries at this layer.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

from ..config import DEFAULT_CONCURRENCY


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchResult(Generic[T, R]):
    """Outcome of one batch item."""
    item: T
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchProcessor:
    """
    Bounded fan-out of independent operations.

    Example:
        >>> bp = BatchProcessor(concurrency=4)
        >>> [r.value for r in bp.run([1, 2, 3], lambda x: x * 2)]
        [2, 4, 6]
    """

    def __init__(self, concurrency: int = DEFAULT_CONCURRENCY):
        if concurrency is None or concurrency <= 0:
            concurrency = DEFAULT_CONCURRENCY
        self.concurrency = concurrency

    def run(self, items: Sequence[T], operation: Callable[[T], R],
            name: str = "batch") -> List[BatchResult]:
        """
        Run operation on every item.

        Args:
            items: Inputs, one task each
            operation: Callable applied to a single item
            name: Label used in log messages

        Returns:
            One BatchResult per item, index-aligned with items
        """
        items = list(items)
        if not items:
            return []

        def _call(item: T) -> BatchResult:
            try:
                return BatchResult(item=item, value=operation(item))
            except Exception as exc:
                logger.warning("%s: item failed: %s", name, exc)
                return BatchResult(item=item, error=exc)

        workers = min(self.concurrency, len(items))
        with ThreadPoolExecutor(max_workers=workers,
                                thread_name_prefix=f"sealfile-{name}") as pool:
            futures = [pool.submit(_call, item) for item in items]
            results = [future.result() for future in futures]

        failed = sum(1 for r in results if not r.ok)
        logger.info("%s: %d items, %d failed", name, len(results), failed)
        return results

    # ========================================================================
    # SecureFile helpers
    # ========================================================================

    def save_all(self, files: Sequence[Any]) -> List[BatchResult]:
        """Save every SecureFile concurrently."""
        return self.run(files, lambda f: f.save_encrypted(), "save")

    def load_all(self, files: Sequence[Any]) -> List[BatchResult]:
        """Load every SecureFile concurrently (fills each file's data)."""
        return self.run(files, lambda f: f.load_decrypted(), "load")

    def delete_all(self, files: Sequence[Any]) -> List[BatchResult]:
        """Delete every SecureFile concurrently."""
        return self.run(files, lambda f: f.delete(), "delete")

    def re_encrypt_all(self, manager: Any, files: Sequence[Any],
                       previous_pepper: Any = None) -> List[BatchResult]:
        """Re-encrypt every SecureFile under the manager's current secret."""
        return self.run(
            files,
            lambda f: manager.re_encrypt_file(f.path, f.filename, previous_pepper),
            "re-encrypt",
        )
