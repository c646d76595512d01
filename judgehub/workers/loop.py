from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging

from judgehub.domain.contracts import DEFAULT_CLAIM_LEASE_SECONDS, ContestRepository, Judge
from judgehub.domain.errors import DomainDependencyError, DomainValidationError, InvalidDataError
from judgehub.domain.verdicts import Verdict, verdict_from_judge_status

logger = logging.getLogger("runtime")


@dataclass
class JudgeLoop:
    role: str
    repository: ContestRepository
    judge: Judge
    claim_lease_seconds: int = DEFAULT_CLAIM_LEASE_SECONDS

    async def run_once(self) -> bool:
        claim = await self.repository.claim_pending_submission(lease_seconds=self.claim_lease_seconds)
        if claim is None:
            return False
        log_extra = {"role": self.role, "submission_id": claim.submission_id}

        try:
            raw_verdict = await asyncio.to_thread(
                self.judge.judge,
                code=claim.code,
                language=claim.language,
            )
        except DomainValidationError:
            # The judge cannot build this submission at all.
            raw_verdict = Verdict.COMPILATION_ERROR.value
        except Exception as exc:
            reason = "judge unavailable" if isinstance(exc, DomainDependencyError) else "judging failed"
            logger.warning("%s, submission returned to queue", reason, extra=log_extra)
            await self._requeue(claim.submission_id)
            raise

        verdict = verdict_from_judge_status(raw_verdict)
        if verdict in (Verdict.PENDING, Verdict.JUDGING):
            verdict = Verdict.INTERNAL_ERROR
        try:
            await self.repository.transition_submission(
                submission_id=claim.submission_id,
                from_status=Verdict.JUDGING,
                to_status=verdict,
            )
        except InvalidDataError:
            # Deleted or re-statused while the judge was running.
            logger.warning("judged submission changed underneath, verdict dropped", extra=log_extra)
            raise
        except Exception:
            await self._requeue(claim.submission_id)
            raise
        logger.info("submission judged", extra={**log_extra, "verdict": verdict.value})
        return True

    async def _requeue(self, submission_id: str) -> None:
        try:
            await self.repository.transition_submission(
                submission_id=submission_id,
                from_status=Verdict.JUDGING,
                to_status=Verdict.PENDING,
            )
        except InvalidDataError:
            logger.warning(
                "submission left judging before it could be requeued",
                extra={"role": self.role, "submission_id": submission_id},
            )
