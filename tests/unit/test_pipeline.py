"""
Unit tests for the eligibility pipeline
"""

import pytest
from core.config import settings
from eligibility.pipeline import CheckStage, EligibilityPipeline
from models.base import StepStatus, StepResult


async def run(pipeline, address):
    return await pipeline.run(
        address["address1"],
        address["address2"],
        address["city"],
        address["state"],
        address["zip_code"],
        address["program_type"],
    )


class TestVerdicts:
    """One test per way a check can end"""

    @pytest.mark.asyncio
    async def test_blacklisted_address_fails(self, build_pipeline, make_lookup, key, sample_address):
        """Blacklist hit stops the check after two steps"""
        lookup = make_lookup(blacklist={key}, whitelist={key: 10})
        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.success == 0
        assert result.final_message == "Address is in blacklist - CHECK FAILED"
        assert [s.step_name for s in result.steps] == [
            CheckStage.NORMALIZE.value,
            CheckStage.BLACKLIST.value,
        ]

        blacklist = result.steps[1]
        assert blacklist.status == StepStatus.COMPLETED
        assert blacklist.result == StepResult.FAILED
        assert blacklist.stop_process is True
        assert blacklist.message == "Address found in blacklist"
        # Whitelist is never consulted once blacklisted
        assert "whitelist" not in lookup.calls

    @pytest.mark.asyncio
    async def test_whitelisted_with_capacity_passes(self, build_pipeline, make_lookup, key, sample_address):
        """Capacity above occupancy passes at the whitelist"""
        lookup = make_lookup(whitelist={key: 10}, occupancy={key + ("LL",): 3})
        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.success == 1
        assert result.final_message == "Address is in whitelist with capacity 10 (occupancy: 3) - CHECK PASSED"
        assert len(result.steps) == 3

        whitelist = result.steps[2]
        assert whitelist.result == StepResult.PASSED
        assert whitelist.stop_process is True
        assert whitelist.capacity == 10
        assert whitelist.occupancy == 3

    @pytest.mark.asyncio
    async def test_whitelisted_at_capacity_fails(self, build_pipeline, make_lookup, key, sample_address):
        """Capacity equal to occupancy fails, even if the status list would allow it"""
        lookup = make_lookup(whitelist={key: 3}, occupancy={key + ("LL",): 3})
        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.success == 0
        assert result.final_message == (
            "Address is in whitelist but capacity 3 is less than or equal to occupancy 3 - CHECK FAILED"
        )
        assert len(result.steps) == 3
        assert result.steps[2].result == StepResult.FAILED
        assert result.steps[2].stop_process is True

    @pytest.mark.asyncio
    async def test_whitelist_capacity_zero_fails_new_address(self, build_pipeline, make_lookup, key, sample_address):
        """Whitelisted with capacity 0 fails even without occupancy"""
        lookup = make_lookup(whitelist={key: 0})
        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.success == 0
        assert "capacity 0 is less than or equal to occupancy 0" in result.final_message

    @pytest.mark.asyncio
    async def test_unknown_address_passes(self, build_pipeline, sample_address):
        """No list mentions the address"""
        result = await run(build_pipeline(occupancy_limit=5), sample_address)

        assert result.success == 1
        assert result.final_message == "Address not found in any list - CHECK PASSED"
        assert [s.step_name for s in result.steps] == [stage.value for stage in CheckStage]

        status_list = result.steps[3]
        assert status_list.result == StepResult.PASSED
        assert status_list.occupancy == 0
        assert status_list.limit == 5
        assert result.steps[2].result == StepResult.NOT_APPLICABLE

    @pytest.mark.asyncio
    async def test_occupancy_within_limit_passes(self, build_pipeline, make_lookup, key, sample_address):
        lookup = make_lookup(occupancy={key + ("LL",): 4})
        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.success == 1
        assert result.final_message == "Address is in status list with occupancy 4 (within limit) - CHECK PASSED"

    @pytest.mark.asyncio
    async def test_occupancy_at_limit_passes(self, build_pipeline, make_lookup, key, sample_address):
        """The limit itself is still acceptable"""
        lookup = make_lookup(occupancy={key + ("LL",): 5})
        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.success == 1
        assert result.steps[3].occupancy == 5

    @pytest.mark.asyncio
    async def test_occupancy_over_limit_fails(self, build_pipeline, make_lookup, key, sample_address):
        lookup = make_lookup(occupancy={key + ("LL",): 6})
        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.success == 0
        assert result.final_message == (
            "Address is in status list with occupancy 6 (exceeds limit of 5) - CHECK FAILED"
        )
        assert result.steps[3].result == StepResult.FAILED

    @pytest.mark.asyncio
    async def test_default_limit_comes_from_settings(self, build_pipeline, sample_address):
        pipeline = build_pipeline()
        assert pipeline.occupancy_limit == settings.DEFAULT_OCCUPANCY_LIMIT


class TestProgramCategories:
    """Occupancy is read for the program category, not the raw tag"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("program_type", ["LL", "LL+EBB", "LL+ACP", " ll+acp "])
    async def test_ll_tags_share_occupancy(self, build_pipeline, make_lookup, key, sample_address, program_type):
        lookup = make_lookup(occupancy={key + ("LL",): 6, key + ("ACP",): 1})
        sample_address["program_type"] = program_type

        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.steps[3].occupancy == 6
        assert result.success == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("program_type", ["EBB", "EBB+LL", "ACP", "ACP+LL"])
    async def test_acp_tags_share_occupancy(self, build_pipeline, make_lookup, key, sample_address, program_type):
        lookup = make_lookup(occupancy={key + ("LL",): 6, key + ("ACP",): 1})
        sample_address["program_type"] = program_type

        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.steps[3].occupancy == 1
        assert result.success == 1

    @pytest.mark.asyncio
    async def test_unknown_tag_is_its_own_category(self, build_pipeline, make_lookup, key, sample_address):
        lookup = make_lookup(occupancy={key + ("LL",): 6, key + ("LIFELINE",): 2})
        sample_address["program_type"] = "LIFELINE"

        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.steps[3].occupancy == 2


class TestNormalizationStep:
    """Normalization never decides the verdict"""

    @pytest.mark.asyncio
    async def test_normalized_key_is_used_for_lookups(self, build_pipeline, sample_address):
        result = await run(build_pipeline(occupancy_limit=5), sample_address)

        normalize = result.steps[0]
        assert normalize.step_name == "Normalize Address"
        assert normalize.status == StepStatus.COMPLETED
        assert normalize.result == StepResult.NOT_APPLICABLE
        assert normalize.stop_process is False
        assert normalize.normalization_fallback is False
        assert normalize.details == "Normalized: 123 MAIN ST, APT 4, SPRINGFIELD"

    @pytest.mark.asyncio
    async def test_fallback_uses_raw_values(self, build_pipeline, make_lookup, sample_address):
        """Canonicalization failure continues with the submitted values"""
        raw_key = ("123 Main St", "Apt 4", "Springfield", "IL", "62701")
        lookup = make_lookup(blacklist={raw_key})

        result = await run(build_pipeline(lookup, fail_normalization=True), sample_address)

        normalize = result.steps[0]
        assert normalize.status == StepStatus.COMPLETED
        assert normalize.normalization_fallback is True
        assert normalize.message == "Normalization functions failed, using original values"
        assert result.success == 0
        assert result.final_message == "Address is in blacklist - CHECK FAILED"

    @pytest.mark.asyncio
    async def test_missing_address2_is_empty(self, build_pipeline, make_lookup, sample_address):
        key = ("123 MAIN ST", "", "SPRINGFIELD", "IL", "62701")
        lookup = make_lookup(blacklist={key})
        sample_address["address2"] = None

        result = await run(build_pipeline(lookup), sample_address)

        assert result.success == 0


class TestLookupFailures:
    """Lookup errors under both failure policies"""

    @pytest.mark.asyncio
    async def test_blacklist_error_fail_open_continues(self, build_pipeline, make_lookup, key, sample_address):
        lookup = make_lookup(fail={"blacklist"}, whitelist={key: 2})
        result = await run(build_pipeline(lookup, failure_policy="fail_open"), sample_address)

        blacklist = result.steps[1]
        assert blacklist.status == StepStatus.ERROR
        assert blacklist.message == "Error checking blacklist"
        assert blacklist.stop_process is False
        assert "connection reset by peer" in blacklist.details

        assert result.success == 1
        assert len(result.steps) == 3

    @pytest.mark.asyncio
    async def test_blacklist_error_fail_closed_blocks(self, build_pipeline, make_lookup, key, sample_address):
        lookup = make_lookup(fail={"blacklist"}, whitelist={key: 2})
        result = await run(build_pipeline(lookup, failure_policy="fail_closed"), sample_address)

        assert result.success == 0
        assert result.final_message == "Blacklist lookup failed - CHECK FAILED"
        assert len(result.steps) == 2
        assert result.steps[1].status == StepStatus.ERROR
        assert result.steps[1].stop_process is True

    @pytest.mark.asyncio
    async def test_occupancy_error_fail_open_assumes_zero(self, build_pipeline, make_lookup, key, sample_address):
        """Whitelist decision still made, step marked as error"""
        lookup = make_lookup(fail={"statuslist"}, whitelist={key: 1})
        result = await run(build_pipeline(lookup, failure_policy="fail_open"), sample_address)

        whitelist = result.steps[2]
        assert whitelist.status == StepStatus.ERROR
        assert whitelist.result == StepResult.PASSED
        assert whitelist.occupancy == 0
        assert "Occupancy lookup failed, assuming 0" in whitelist.details
        assert result.success == 1

    @pytest.mark.asyncio
    async def test_occupancy_error_fail_closed_blocks(self, build_pipeline, make_lookup, key, sample_address):
        lookup = make_lookup(fail={"statuslist"}, whitelist={key: 1})
        result = await run(build_pipeline(lookup, failure_policy="fail_closed"), sample_address)

        assert result.success == 0
        assert result.final_message == "Occupancy lookup failed - CHECK FAILED"
        assert len(result.steps) == 3

    @pytest.mark.asyncio
    async def test_whitelist_error_fail_open_reaches_status_list(self, build_pipeline, make_lookup, sample_address):
        lookup = make_lookup(fail={"whitelist"})
        result = await run(build_pipeline(lookup, failure_policy="fail_open", occupancy_limit=5), sample_address)

        assert result.steps[2].status == StepStatus.ERROR
        assert result.steps[2].result == StepResult.NOT_APPLICABLE
        assert result.final_message == "Address not found in any list - CHECK PASSED"
        assert len(result.steps) == 4

    @pytest.mark.asyncio
    async def test_whitelist_error_fail_closed_blocks(self, build_pipeline, make_lookup, sample_address):
        lookup = make_lookup(fail={"whitelist"})
        result = await run(build_pipeline(lookup, failure_policy="fail_closed"), sample_address)

        assert result.success == 0
        assert result.final_message == "Whitelist lookup failed - CHECK FAILED"

    def test_unknown_policy_rejected(self, build_pipeline):
        with pytest.raises(ValueError):
            build_pipeline(failure_policy="fail_sideways")


class TestTraceInvariants:
    """Properties every trace has"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("lists", [
        {"blacklist": True},
        {"whitelist": 10},
        {"whitelist": 1, "occupancy": 1},
        {"occupancy": 7},
        {},
    ])
    async def test_only_last_step_stops(self, build_pipeline, make_lookup, key, sample_address, lists):
        lookup = make_lookup(
            blacklist={key} if lists.get("blacklist") else set(),
            whitelist={key: lists["whitelist"]} if "whitelist" in lists else {},
            occupancy={key + ("LL",): lists["occupancy"]} if "occupancy" in lists else {},
        )
        result = await run(build_pipeline(lookup, occupancy_limit=5), sample_address)

        assert result.steps[0].step_name == "Normalize Address"
        assert all(not step.stop_process for step in result.steps[:-1])
        assert all(step.status != StepStatus.PROCESSING for step in result.steps)
        assert result.final_message.endswith("CHECK PASSED" if result.success else "CHECK FAILED")

    @pytest.mark.asyncio
    async def test_repeated_runs_are_identical(self, build_pipeline, make_lookup, key, sample_address):
        pipeline = build_pipeline(make_lookup(occupancy={key + ("LL",): 2}), occupancy_limit=5)

        first = await run(pipeline, sample_address)
        second = await run(pipeline, sample_address)

        assert first.model_dump() == second.model_dump()

    @pytest.mark.asyncio
    async def test_result_serializes_camel_case(self, build_pipeline, sample_address):
        result = await run(build_pipeline(occupancy_limit=5), sample_address)
        data = result.model_dump(mode="json", by_alias=True)

        assert data["success"] == 1
        assert data["finalMessage"] == "Address not found in any list - CHECK PASSED"
        assert data["steps"][0]["stepName"] == "Normalize Address"
        assert data["steps"][0]["result"] == -1
        assert data["steps"][3]["stopProcess"] is False
        assert data["steps"][3]["status"] == "completed"


def test_pipeline_requires_normalizer_and_lookup():
    with pytest.raises(TypeError):
        EligibilityPipeline()


class TestOccupancyFailureTrace:
    """An occupancy lookup error stays visible in every step it affects"""

    @pytest.mark.asyncio
    async def test_occupancy_and_whitelist_errors_both_recorded(self, build_pipeline, make_lookup, sample_address):
        lookup = make_lookup(fail={"statuslist", "whitelist"})
        result = await run(build_pipeline(lookup, failure_policy="fail_open", occupancy_limit=5), sample_address)

        whitelist = result.steps[2]
        assert whitelist.status == StepStatus.ERROR
        assert whitelist.failed_lookups == ["whitelist", "statuslist"]
        assert whitelist.message == "Error checking whitelist"
        assert "Occupancy lookup failed, assuming 0" in whitelist.details

        status_list = result.steps[3]
        assert status_list.status == StepStatus.ERROR
        assert status_list.failed_lookups == ["statuslist"]
        assert status_list.details == "Occupancy lookup failed, assuming 0"
        assert result.final_message == "Address not found in any list - CHECK PASSED"

    @pytest.mark.asyncio
    async def test_status_list_not_reported_as_empty(self, build_pipeline, make_lookup, sample_address):
        lookup = make_lookup(fail={"statuslist"})
        result = await run(build_pipeline(lookup, failure_policy="fail_open", occupancy_limit=5), sample_address)

        assert result.steps[2].failed_lookups == ["statuslist"]
        assert result.steps[3].details != "No occupancy data found"
        assert result.steps[3].status == StepStatus.ERROR

    @pytest.mark.asyncio
    async def test_successful_steps_have_no_failed_lookups(self, build_pipeline, sample_address):
        result = await run(build_pipeline(occupancy_limit=5), sample_address)

        assert all(step.failed_lookups == [] for step in result.steps)
