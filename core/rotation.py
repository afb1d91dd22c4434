"""Daily rotation job: sample each scheduled tier, then write the words back."""

import logging
import random
from datetime import datetime
from typing import Callable

from .errors import DuplicateWordError, StoreError
from .evictor import ActiveSetEvictor
from .interfaces import ActiveSetStore, CatalogStore
from .models import ActiveEntry, RequestOutcome, RotationReport, RotationRequest
from .sampler import WordSampler
from .schedule import load_schedule
from .utils import utc_now

logger = logging.getLogger(__name__)

SUCCESS = 'Success'


class RotationJob:
    """Runs the schedule against the sampler and inserts the selected words.

    Requests run in order. A store failure during one request is logged and
    recorded in the report, and the job moves on to the next request.
    Inserts are not transactional: a failed insert drops that word only.
    """

    def __init__(self, catalog: CatalogStore, active_set: ActiveSetStore,
                 schedule: list[RotationRequest] = None, rng: random.Random = None,
                 now: Callable[[], datetime] = utc_now):
        self.catalog = catalog
        self.active_set = active_set
        self.schedule = schedule if schedule is not None else load_schedule()
        self.now = now
        self.evictor = ActiveSetEvictor(active_set, now=now)
        self.sampler = WordSampler(catalog, active_set, self.evictor, rng=rng)

    def select(self, report: RotationReport) -> None:
        """Sample every scheduled request into the report."""
        for request in self.schedule:
            outcome = RequestOutcome(request)
            report.outcomes.append(outcome)
            try:
                outcome.selected = self.sampler.sample(request)
            except StoreError as e:
                outcome.error = str(e)
                logger.error(f"Store error while sampling {request.label}: {e}")
                continue
            if outcome.shortfall:
                logger.warning(f"{request.label}: selected {len(outcome.selected)}/{request.count}")

    def persist(self, report: RotationReport) -> None:
        """Insert every selected word into the active set, in request order."""
        for word in report.selected_words:
            logger.info(f"{word.word} {word.narration_asset} {word.syllable_count} {word.difficulty}")
            entry = ActiveEntry.from_catalog_word(word, self.now())
            try:
                self.active_set.insert_active_entry(entry)
            except DuplicateWordError:
                # Another run inserted it between the check and the insert
                logger.info(f"Skipping '{word.word}': already in active set")
                report.duplicates.append(word.word)
            except StoreError as e:
                logger.error(f"Failed to insert '{word.word}': {e}")
                report.insert_errors[word.word] = str(e)
            else:
                report.inserted.append(word.word)

    def run(self) -> RotationReport:
        report = RotationReport()
        self.select(report)
        self.persist(report)
        logger.info(f"Rotation complete: {len(report.inserted)}/{report.requested} words inserted, "
                    f"{len(report.failed_requests)} failed requests")
        self._log_event(report)
        return report

    def _log_event(self, report: RotationReport) -> None:
        if not hasattr(self.active_set, 'log_event'):
            return
        try:
            self.active_set.log_event('rotation.run', **report.to_dict())
        except StoreError as e:
            logger.error(f"Failed to record rotation event: {e}")


def main(storage, schedule: list[RotationRequest] = None, rng: random.Random = None) -> str:
    """Run one rotation against a storage backend serving both stores.

    Always returns the success signal; under-fulfillment is only visible in
    the logs and the recorded event.
    """
    RotationJob(storage, storage, schedule=schedule, rng=rng).run()
    return SUCCESS
