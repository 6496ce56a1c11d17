"""
Render a CheckResult into the human-readable audit view
"""

from typing import Dict, List, Optional
from eligibility.pipeline import CheckStage
from models.base import ListName, StepStatus, StepResult
from schemas.check import CheckResult, CheckReport, CheckStep, ReportLine

PASSED_VERDICT = "CHECK PASSED"
FAILED_VERDICT = "CHECK FAILED"

ICON_SUCCESS = "success"
ICON_ERROR = "error"
ICON_SKIPPED = "skipped"


class ResultPresenter:
    """
    Projection of a CheckResult into one explanation line per stage.

    Reads only the trace: success and step results are never changed. The
    normalization step is hidden unless it errored. Stages missing from the
    trace because an earlier stage stopped the run get a "not needed" line.
    A step whose lookup errored is reported as a lookup failure, never as a
    list hit, whatever its result.
    """

    def render(self, result: CheckResult) -> CheckReport:
        steps: Dict[str, CheckStep] = {step.step_name: step for step in result.steps}
        lines: List[ReportLine] = []
        final_message = result.final_message

        normalize = steps.get(CheckStage.NORMALIZE.value)
        if normalize is not None and normalize.status == StepStatus.ERROR:
            lines.append(self._line(normalize, f"address normalization failed: {normalize.message}"))
            final_message = f"Normalization Error: {normalize.message}. {final_message}"

        blacklist = steps.get(CheckStage.BLACKLIST.value)
        whitelist = steps.get(CheckStage.WHITELIST.value)
        status_list = steps.get(CheckStage.STATUS_LIST.value)

        lines.append(self._blacklist_line(blacklist))
        lines.append(self._whitelist_line(whitelist, blacklist))
        lines.append(self._status_list_line(status_list, blacklist, whitelist))

        return CheckReport(
            verdict=PASSED_VERDICT if result.success == 1 else FAILED_VERDICT,
            success=result.success,
            lines=lines,
            final_message=final_message,
        )

    @staticmethod
    def _icon(result: int) -> str:
        if result == StepResult.PASSED:
            return ICON_SUCCESS
        if result == StepResult.FAILED:
            return ICON_ERROR
        return ICON_SKIPPED

    def _line(self, step: CheckStep, text: str) -> ReportLine:
        return ReportLine(step_name=step.step_name, icon=self._icon(step.result), text=text)

    @staticmethod
    def _skipped(stage: CheckStage, text: str) -> ReportLine:
        return ReportLine(step_name=stage.value, icon=ICON_SKIPPED, text=text)

    @staticmethod
    def _stopped(step: Optional[CheckStep]) -> bool:
        return step is not None and step.stop_process

    @staticmethod
    def _number(value: Optional[int]) -> str:
        return "?" if value is None else str(value)

    @staticmethod
    def _failed(step: CheckStep, list_name: ListName) -> bool:
        return step.status == StepStatus.ERROR and list_name.value in step.failed_lookups

    def _blacklist_line(self, blacklist: Optional[CheckStep]) -> ReportLine:
        if blacklist is None:
            return self._skipped(CheckStage.BLACKLIST, "blacklist check not needed")
        if self._failed(blacklist, ListName.BLACKLIST):
            return self._line(blacklist, f"blacklist lookup failed: {blacklist.details}")
        if blacklist.result == StepResult.FAILED:
            return self._line(blacklist, "address found in blacklist")
        return self._line(blacklist, "address not found in blacklist")

    def _whitelist_line(self, whitelist: Optional[CheckStep], blacklist: Optional[CheckStep]) -> ReportLine:
        if whitelist is None:
            return self._skipped(CheckStage.WHITELIST, "whitelist check not needed")

        if self._failed(whitelist, ListName.WHITELIST):
            return self._line(whitelist, f"whitelist lookup failed: {whitelist.details}")

        occupancy_failed = self._failed(whitelist, ListName.STATUSLIST)
        if occupancy_failed and whitelist.capacity is None and whitelist.stop_process:
            # Stopped before the whitelist was read
            return self._line(whitelist, f"occupancy lookup failed: {whitelist.details}")
        suffix = " (occupancy lookup failed, assumed 0)" if occupancy_failed else ""

        if whitelist.result in (StepResult.FAILED, StepResult.PASSED):
            # Same wording for pass and fail, only the icon differs
            return self._line(
                whitelist,
                f"address found in whitelist with occupancy {self._number(whitelist.occupancy)} "
                f"(limit {self._number(whitelist.capacity)}){suffix}",
            )

        if blacklist is not None and blacklist.result == StepResult.FAILED and blacklist.stop_process:
            return self._line(whitelist, "whitelist check not needed")
        return self._line(whitelist, f"address not found in whitelist{suffix}")

    def _status_list_line(
        self,
        status_list: Optional[CheckStep],
        blacklist: Optional[CheckStep],
        whitelist: Optional[CheckStep]
    ) -> ReportLine:
        if status_list is None:
            return self._skipped(CheckStage.STATUS_LIST, "status list check not needed")

        if self._failed(status_list, ListName.STATUSLIST):
            return self._line(status_list, "status list occupancy unavailable, assumed 0")

        if status_list.result in (StepResult.FAILED, StepResult.PASSED):
            if status_list.result == StepResult.PASSED and not status_list.occupancy:
                return self._line(status_list, "address found in status list (new address)")
            return self._line(
                status_list,
                f"address found in status list with occupancy {self._number(status_list.occupancy)} "
                f"(limit {self._number(status_list.limit)})",
            )

        if self._stopped(whitelist) or self._stopped(blacklist):
            return self._line(status_list, "status list check not needed")
        return self._line(status_list, "address not found in status list")
