from compblocks.domain import positions
from compblocks.domain.months import month_of, next_month, parse_date, previous_month
from compblocks.domain.stages import stage


def test_resolve_position_aliases():
    assert positions.resolve_position("督導(代理店長)") == "supervisor_acting_store_manager"
    assert positions.resolve_position("督導（代理店長）") == "supervisor_acting_store_manager"
    assert positions.resolve_position("Supervisor (Acting Store Manager)") == "supervisor_acting_store_manager"
    assert positions.resolve_position("store_manager") == "store_manager"
    assert positions.resolve_position("兼職藥師") == "part_time_pharmacist"
    assert positions.resolve_position("part-time assistant") == "part_time_assistant"


def test_unknown_position_kept_without_tags():
    assert positions.resolve_position("  regional trainer ") == "regional trainer"
    assert positions.position_tags("regional trainer") == frozenset()
    assert positions.resolve_position("   ") is None


def test_supervisor_is_not_acting_manager():
    assert positions.position_tags("supervisor") == frozenset({positions.SUPERVISOR})
    assert positions.position_tags("supervisor_acting_store_manager") == frozenset(
        {positions.SUPERVISOR, positions.ACTING_STORE_MANAGER}
    )


def test_extra_tasks_resolved_and_deduplicated():
    assert positions.resolve_extra_tasks(["長照外務", "long-term care outreach", "診所業務"]) == (
        "long_term_care_outreach",
        "clinic_business",
    )
    assert positions.resolve_extra_tasks(None) == ()


def test_stage_lookup():
    assert stage("store_manager", None) == "tier-3"
    assert stage("newbie", "newbie_tier_2") == "tier-2"
    assert stage("newbie", positions.resolve_newbie_level("一階新人")) == "tier-1"
    assert stage("newbie", None) == "pre-tier-1"
    assert stage("admin", "admin_passed") == "admin(passed)"
    assert stage("admin", None) == "admin(not passed)"
    assert stage("part_time_specialist", None) == "tier-3"
    assert stage("part_time_pharmacist", None) == "not passed"
    assert stage("part_time_pharmacist_specialist", None) == "tier-3"
    assert stage("part_time_assistant", None) == "not passed"
    assert stage("regional trainer", None) == ""
    assert stage(None, None) == ""


def test_month_helpers():
    day = parse_date("2025-03-15")
    assert month_of(day) == "2025-03"
    assert parse_date("2025/03/15") == day
    assert parse_date("15.03.2025") is None
    assert next_month("2025-12") == "2026-01"
    assert previous_month("2025-01") == "2024-12"
