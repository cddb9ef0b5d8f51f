from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence

from ..lookups.models import AttributeKind
from ..lookups.service import AttributeLookupService

logger = logging.getLogger(__name__)


@dataclass
class RefreshReport:
    total: int = 0
    succeeded: list[str] = field(default_factory=list)
    failed: list[dict[str, str]] = field(default_factory=list)


class ReviewRefresher:
    """Re-fetch reviews for many restaurants without tripping rate limits.

    Names are processed in fixed-size concurrent batches with a pause
    between batches.
    """

    def __init__(
        self,
        lookups: AttributeLookupService,
        batch_size: int = 10,
        delay: float = 2.0,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.lookups = lookups
        self.batch_size = batch_size
        self.delay = delay

    async def run(self, names: Sequence[str], kind: AttributeKind = AttributeKind.reviews) -> RefreshReport:
        unique = list(dict.fromkeys(names))
        report = RefreshReport(total=len(unique))

        for start in range(0, len(unique), self.batch_size):
            batch = unique[start:start + self.batch_size]
            results = await asyncio.gather(*(self.lookups.refresh(name, kind) for name in batch))
            for name, result in zip(batch, results):
                if result.found:
                    report.succeeded.append(name)
                else:
                    report.failed.append({"name": name, "error": "No data from external source"})

            if start + self.batch_size < len(unique) and self.delay > 0:
                await asyncio.sleep(self.delay)

        logger.info(
            "Refresh completed: %d ok, %d failed of %d",
            len(report.succeeded), len(report.failed), report.total,
        )
        return report
