"""
Batch matching of candidates against one job description.

Candidates are scored independently on a thread pool. Any error raised
while scoring one candidate is recorded against that candidate and does not
abort the batch; request-level errors (bad weights, duplicate candidates, a
corrupt JD) are raised before any scoring starts.
"""
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Dict, List, Optional, Sequence, Tuple

from talent_match.models.match import (
    CandidateBreakdown,
    CandidateFailure,
    MatchResult,
    NormalizedWeightVector,
    WeightVector,
)
from talent_match.models.vectors import VectorSet
from talent_match.services.candidate_scorer import score_candidate
from talent_match.services.requirement_matcher import DEFAULT_TOP_ALTERNATIVES
from talent_match.services.weights import normalize_weights
from talent_match.utils.exceptions import DuplicateCandidate, TalentMatchError, ValidationError
from talent_match.utils.logging_config import PerformanceMonitor, get_logger

logger = get_logger(__name__)

# error code for unexpected exceptions raised while scoring one candidate
SCORING_ERROR = "SCORING_ERROR"


def failure_from_error(candidate_id: str, exc: Exception) -> CandidateFailure:
    if isinstance(exc, TalentMatchError):
        return CandidateFailure(
            candidate_id=candidate_id,
            error_type=exc.__class__.__name__,
            error_code=exc.error_code,
            message=exc.message,
        )
    return CandidateFailure(
        candidate_id=candidate_id,
        error_type=exc.__class__.__name__,
        error_code=SCORING_ERROR,
        message=str(exc) or exc.__class__.__name__,
    )


def ensure_unique(candidate_ids: Sequence[str]) -> None:
    seen = set()
    for candidate_id in candidate_ids:
        if candidate_id in seen:
            raise DuplicateCandidate(candidate_id)
        seen.add(candidate_id)


def rank_breakdowns(breakdowns: List[CandidateBreakdown]) -> List[CandidateBreakdown]:
    """Overall score descending, candidate id ascending on ties"""
    return sorted(breakdowns, key=lambda b: (-b.overall_score, b.candidate_id))


class MatchOrchestrator:
    """Runs candidate scoring over a batch and assembles the ranked result"""

    def __init__(self, max_workers: Optional[int] = None, slow_threshold_ms: float = 1000.0):
        self.max_workers = max_workers
        self.slow_threshold_ms = slow_threshold_ms

    def run(
        self,
        jd: VectorSet,
        candidates: Sequence[VectorSet],
        weights: Optional[WeightVector] = None,
        top_alternatives: Optional[int] = None,
        prior_failures: Sequence[CandidateFailure] = (),
    ) -> MatchResult:
        """
        Score every candidate against the JD and rank the results.

        Args:
            jd: Job description vectors
            candidates: Candidate vectors, unique by document_id
            weights: Raw caller weights, normalized before scoring
            top_alternatives: Alternatives reported per JD item (default 3)
            prior_failures: Candidates that already failed upstream (e.g. not found);
                they are reported alongside scoring failures

        Raises:
            InvalidWeight: a weight is negative
            DuplicateCandidate: a candidate id repeats
            DimensionMismatch: the JD's own vectors are inconsistent
            InvalidVector: the JD has NaN or infinite components
        """
        if top_alternatives is None:
            top_alternatives = DEFAULT_TOP_ALTERNATIVES
        if top_alternatives < 0:
            raise ValidationError("top_alternatives must be >= 0", field="top_alternatives", value=top_alternatives)

        effective_weights = normalize_weights(weights)
        ensure_unique([c.document_id for c in candidates] + [f.candidate_id for f in prior_failures])
        jd.check_dimension()
        jd.check_finite()

        logger.info(
            f"Matching {len(candidates)} candidates against JD {jd.document_id} "
            f"(weights={effective_weights.model_dump()}, top_alternatives={top_alternatives})"
        )

        if not candidates:
            return MatchResult(
                jd_id=jd.document_id,
                weights=effective_weights,
                top_alternatives=top_alternatives,
                failures=list(prior_failures),
            )

        with PerformanceMonitor("match batch", logger, self.slow_threshold_ms,
                                jd_id=jd.document_id, candidates=len(candidates)) as monitor:
            breakdowns, failures = self._score_all(jd, candidates, effective_weights, top_alternatives)
            monitor.add(failures=len(failures) + len(prior_failures))

        failures = list(prior_failures) + failures
        if failures:
            logger.warning(f"{len(failures)} candidates could not be scored for JD {jd.document_id}")

        return MatchResult(
            jd_id=jd.document_id,
            weights=effective_weights,
            top_alternatives=top_alternatives,
            candidates=rank_breakdowns(breakdowns),
            failures=sorted(failures, key=lambda f: f.candidate_id),
        )

    def _score_all(
        self,
        jd: VectorSet,
        candidates: Sequence[VectorSet],
        weights: NormalizedWeightVector,
        top_alternatives: int,
    ) -> Tuple[List[CandidateBreakdown], List[CandidateFailure]]:
        breakdowns: List[CandidateBreakdown] = []
        failures: List[CandidateFailure] = []

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="match")
        futures: Dict[str, Future] = {}
        try:
            for cv in candidates:
                futures[cv.document_id] = executor.submit(score_candidate, jd, cv, weights, top_alternatives)

            for candidate_id, future in futures.items():
                try:
                    breakdowns.append(future.result())
                except TalentMatchError as e:
                    logger.warning(f"Candidate {candidate_id} failed: {e.message}", extra={"details": e.details})
                    failures.append(failure_from_error(candidate_id, e))
                except Exception as e:
                    logger.error(f"Unexpected error scoring candidate {candidate_id}: {e}", exc_info=True)
                    failures.append(failure_from_error(candidate_id, e))
        except BaseException:
            # abandon queued candidates; finished results are left as they are
            for future in futures.values():
                future.cancel()
            raise
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return breakdowns, failures


def run_match(
    jd: VectorSet,
    candidates: Sequence[VectorSet],
    weights: Optional[WeightVector] = None,
    top_alternatives: Optional[int] = None,
    max_workers: Optional[int] = None,
) -> MatchResult:
    return MatchOrchestrator(max_workers=max_workers).run(jd, candidates, weights, top_alternatives)
