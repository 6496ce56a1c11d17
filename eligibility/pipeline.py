# ============================================================================
# File: eligibility/pipeline.py
# Description: Ordered blacklist -> whitelist -> status list eligibility check
# ============================================================================
"""
Eligibility Pipeline - decides whether an address may proceed.

The check is a fixed sequence of stages:

    1. Normalize Address  - build the NormalizedKey (never fails the check)
    2. Check Blacklist    - presence blocks the address
    3. Check Whitelist    - presence passes or fails on capacity vs occupancy
    4. Check Status List  - occupancy against the default limit

Each stage appends exactly one CheckStep to the trace and returns a
StageOutcome: Blocked and Passed end the run, Continue hands over to the
next stage. Nothing is appended after a terminal outcome.

Lookup failures never escape a run. With the fail_open policy they are
recorded as error steps and resolved as "not found"; with fail_closed they
end the run as a failed check.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple, Union
from core.config import settings
from core.exceptions import ListLookupError
from eligibility.lookups import ListLookup
from eligibility.normalizer import AddressNormalizer, NormalizedKey
from eligibility.program_types import normalize_program_type
from models.base import ListName, StepStatus, StepResult
from schemas.check import CheckResult, CheckStep
import enum
import logging

logger = logging.getLogger(__name__)

FAIL_OPEN = "fail_open"
FAIL_CLOSED = "fail_closed"


class CheckStage(str, enum.Enum):
    """Stages of the check, in execution order"""
    NORMALIZE = "Normalize Address"
    BLACKLIST = "Check Blacklist"
    WHITELIST = "Check Whitelist"
    STATUS_LIST = "Check Status List"


# ============================================================================
# Stage outcomes
# ============================================================================

@dataclass(frozen=True)
class Continue:
    """Hand over to the next stage"""
    pass


@dataclass(frozen=True)
class Passed:
    """End the run, address is eligible"""
    final_message: str


@dataclass(frozen=True)
class Blocked:
    """End the run, address is not eligible"""
    final_message: str


StageOutcome = Union[Continue, Passed, Blocked]


@dataclass
class CheckContext:
    """State shared by the stages of one run"""
    address1: str
    address2: str
    city: str
    state: str
    zip_code: str
    program_type: str
    program_category: str
    key: Optional[NormalizedKey] = None
    occupancy: int = 0
    occupancy_failed: bool = False


class EligibilityPipeline:
    """
    Runs one eligibility check against injected collaborators.

    The pipeline holds no state between runs; every run re-reads the lists
    through the lookup it was given.
    """

    def __init__(
        self,
        normalizer: AddressNormalizer,
        lookup: ListLookup,
        occupancy_limit: Optional[int] = None,
        failure_policy: Optional[str] = None
    ):
        self.normalizer = normalizer
        self.lookup = lookup
        self.occupancy_limit = (
            settings.DEFAULT_OCCUPANCY_LIMIT if occupancy_limit is None else occupancy_limit
        )
        self.failure_policy = failure_policy or settings.LOOKUP_FAILURE_POLICY
        if self.failure_policy not in (FAIL_OPEN, FAIL_CLOSED):
            raise ValueError(f"Unknown lookup failure policy: {self.failure_policy}")

    @property
    def fail_closed(self) -> bool:
        return self.failure_policy == FAIL_CLOSED

    def _stages(self) -> List[Tuple[CheckStage, str, Callable[[CheckContext, CheckStep], Awaitable[StageOutcome]]]]:
        return [
            (
                CheckStage.NORMALIZE,
                "Normalizing address using get_hohaddress1, get_hohaddress2, get_hohcity",
                self._normalize,
            ),
            (CheckStage.BLACKLIST, "Checking if address exists in blacklist", self._check_blacklist),
            (CheckStage.WHITELIST, "Checking if address exists in whitelist", self._check_whitelist),
            (CheckStage.STATUS_LIST, "Checking occupancy in status list", self._check_status_list),
        ]

    async def run(
        self,
        address1: str,
        address2: str,
        city: str,
        state: str,
        zip_code: str,
        program_type: str
    ) -> CheckResult:
        """
        Run every stage in order until one reaches a verdict.

        Returns:
            CheckResult with success 0/1, the ordered trace and the final message
        """
        ctx = CheckContext(
            address1=address1,
            address2=address2 or "",
            city=city,
            state=state,
            zip_code=zip_code,
            program_type=program_type,
            program_category=normalize_program_type(program_type),
        )
        steps: List[CheckStep] = []

        for stage, pending_message, handler in self._stages():
            step = CheckStep(
                step_name=stage.value,
                status=StepStatus.PROCESSING,
                message=pending_message,
            )
            steps.append(step)

            outcome = await handler(ctx, step)

            if isinstance(outcome, Passed):
                return self._finish(ctx, steps, 1, outcome.final_message)
            if isinstance(outcome, Blocked):
                return self._finish(ctx, steps, 0, outcome.final_message)

        # The status list stage always reaches a verdict
        raise RuntimeError("Eligibility pipeline ended without a verdict")

    def _finish(self, ctx: CheckContext, steps: List[CheckStep], success: int, final_message: str) -> CheckResult:
        logger.info(
            f"Address check {ctx.address1}, {ctx.city}, {ctx.state} {ctx.zip_code} "
            f"[{ctx.program_type} -> {ctx.program_category}]: {final_message}"
        )
        return CheckResult(success=success, steps=steps, final_message=final_message)

    def _lookup_failed(self, step: CheckStep, message: str, error: ListLookupError, list_name: ListName):
        step.status = StepStatus.ERROR
        step.failed_lookups.append(list_name.value)
        step.message = message
        step.details = str(error.original_exception or error.message)
        log = logger.error if self.fail_closed else logger.warning
        log(f"{message}: {step.details}")

    # ------------------------------------------------------------------
    # Stage 1: Normalize
    # ------------------------------------------------------------------

    async def _normalize(self, ctx: CheckContext, step: CheckStep) -> StageOutcome:
        outcome = await self.normalizer.normalize(ctx.address1, ctx.address2, ctx.city)
        ctx.key = outcome.key

        step.status = StepStatus.COMPLETED
        step.result = StepResult.NOT_APPLICABLE
        step.normalization_fallback = outcome.fallback
        if outcome.fallback:
            step.message = "Normalization functions failed, using original values"
            step.details = f"Original: {ctx.address1}, {ctx.address2}, {ctx.city}"
        else:
            step.message = "Address normalized successfully"
            step.details = f"Normalized: {outcome.key}"
        return Continue()

    # ------------------------------------------------------------------
    # Stage 2: Blacklist
    # ------------------------------------------------------------------

    async def _check_blacklist(self, ctx: CheckContext, step: CheckStep) -> StageOutcome:
        try:
            in_blacklist = await self.lookup.lookup_blacklist(ctx.key, ctx.state, ctx.zip_code)
        except ListLookupError as e:
            self._lookup_failed(step, "Error checking blacklist", e, ListName.BLACKLIST)
            if self.fail_closed:
                step.result = StepResult.FAILED
                step.stop_process = True
                return Blocked("Blacklist lookup failed - CHECK FAILED")
            return Continue()

        step.status = StepStatus.COMPLETED
        if in_blacklist:
            step.message = "Address found in blacklist"
            step.details = "Address is blocked"
            step.result = StepResult.FAILED
            step.stop_process = True
            return Blocked("Address is in blacklist - CHECK FAILED")

        step.message = "Address not found in blacklist"
        step.details = "Proceeding to whitelist check"
        step.result = StepResult.PASSED
        return Continue()

    # ------------------------------------------------------------------
    # Stage 3: Whitelist
    # ------------------------------------------------------------------

    async def _check_whitelist(self, ctx: CheckContext, step: CheckStep) -> StageOutcome:
        occupancy_error: Optional[ListLookupError] = None
        try:
            ctx.occupancy = await self.lookup.lookup_occupancy(
                ctx.key.address1,
                ctx.key.address2,
                ctx.key.city,
                ctx.state,
                ctx.zip_code,
                ctx.program_category,
            )
        except ListLookupError as e:
            occupancy_error = e
            ctx.occupancy = 0
            ctx.occupancy_failed = True

        if occupancy_error is not None and self.fail_closed:
            self._lookup_failed(step, "Error reading occupancy", occupancy_error, ListName.STATUSLIST)
            step.result = StepResult.FAILED
            step.stop_process = True
            return Blocked("Occupancy lookup failed - CHECK FAILED")

        try:
            in_whitelist, capacity = await self.lookup.lookup_whitelist(ctx.key, ctx.state, ctx.zip_code)
        except ListLookupError as e:
            self._lookup_failed(step, "Error checking whitelist", e, ListName.WHITELIST)
            if occupancy_error is not None:
                self._occupancy_assumed_zero(step, occupancy_error)
            if self.fail_closed:
                step.result = StepResult.FAILED
                step.stop_process = True
                return Blocked("Whitelist lookup failed - CHECK FAILED")
            return Continue()

        outcome = self._decide_whitelist(ctx, step, in_whitelist, capacity)

        if occupancy_error is not None:
            self._occupancy_assumed_zero(step, occupancy_error)
        return outcome

    def _occupancy_assumed_zero(self, step: CheckStep, error: ListLookupError):
        details = step.details
        self._lookup_failed(step, step.message, error, ListName.STATUSLIST)
        step.details = f"{details}. Occupancy lookup failed, assuming 0: {step.details}"

    def _decide_whitelist(self, ctx: CheckContext, step: CheckStep, in_whitelist: bool, capacity: int) -> StageOutcome:
        step.status = StepStatus.COMPLETED
        occupancy = ctx.occupancy

        if not in_whitelist:
            step.message = "Address not found in whitelist"
            step.details = "Proceeding to status list check"
            step.result = StepResult.NOT_APPLICABLE
            return Continue()

        step.capacity = capacity
        step.occupancy = occupancy
        step.stop_process = True

        if capacity > occupancy:
            step.message = "Address found in whitelist with sufficient capacity"
            step.details = f"Capacity: {capacity}, Occupancy: {occupancy}"
            step.result = StepResult.PASSED
            return Passed(
                f"Address is in whitelist with capacity {capacity} (occupancy: {occupancy}) - CHECK PASSED"
            )

        step.message = "Address found in whitelist but capacity exceeded or equal to occupancy"
        step.details = (
            f"Capacity: {capacity}, Occupancy: {occupancy}. "
            f"Capacity must be greater than occupancy"
        )
        step.result = StepResult.FAILED
        return Blocked(
            f"Address is in whitelist but capacity {capacity} is less than or equal to "
            f"occupancy {occupancy} - CHECK FAILED"
        )

    # ------------------------------------------------------------------
    # Stage 4: Status list
    # ------------------------------------------------------------------

    async def _check_status_list(self, ctx: CheckContext, step: CheckStep) -> StageOutcome:
        occupancy = ctx.occupancy
        limit = self.occupancy_limit

        step.status = StepStatus.COMPLETED
        step.occupancy = occupancy
        step.limit = limit

        if ctx.occupancy_failed:
            # Only reachable under fail_open; occupancy was never read
            step.status = StepStatus.ERROR
            step.failed_lookups.append(ListName.STATUSLIST.value)
            step.message = "Occupancy unavailable, treating address as not found in status list"
            step.details = "Occupancy lookup failed, assuming 0"
            step.result = StepResult.PASSED
            return Passed("Address not found in any list - CHECK PASSED")

        if occupancy == 0:
            step.message = "Address not found in status list"
            step.details = "No occupancy data found"
            step.result = StepResult.PASSED
            return Passed("Address not found in any list - CHECK PASSED")

        step.details = f"Occupancy: {occupancy} (limit: {limit})"
        if occupancy <= limit:
            step.message = "Address found in status list with acceptable occupancy"
            step.result = StepResult.PASSED
            return Passed(f"Address is in status list with occupancy {occupancy} (within limit) - CHECK PASSED")

        step.message = "Address found in status list but occupancy exceeds limit"
        step.result = StepResult.FAILED
        return Blocked(
            f"Address is in status list with occupancy {occupancy} (exceeds limit of {limit}) - CHECK FAILED"
        )
