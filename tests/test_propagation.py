from __future__ import annotations

from compblocks.dao import employees_dao, movements_dao, snapshots_dao
from compblocks.domain.models import EmployeeMaster, MonthlySnapshot, MovementRecord
from compblocks.services import propagation

MONTHS = ["2025-01", "2025-02", "2025-03", "2025-04", "2025-05"]


def seed_timeline(code: str = "E001", position: str = "specialist") -> None:
    for ym in MONTHS:
        propagation.write(
            MonthlySnapshot(
                employee_code=code,
                year_month=ym,
                employee_name="Test",
                store_id="S1",
                position=position,
                employment_type="full_time",
                monthly_status="full_month",
                employment_status="active",
            )
        )


def record(code: str, movement_type: str, day: str, new_value: str | None = None) -> MovementRecord:
    return movements_dao.insert(
        MovementRecord(employee_code=code, movement_type=movement_type, movement_date=day, new_value=new_value)
    )


def positions_by_month(code: str = "E001") -> dict:
    return {s.year_month: s.position for s in snapshots_dao.list_employee_months(code)}


def test_promotion_boundary(ctx):
    seed_timeline()
    first = record("E001", "promotion", "2025-03-01", "store_manager")
    propagation.apply(first)
    assert positions_by_month() == {
        "2025-01": "specialist",
        "2025-02": "specialist",
        "2025-03": "store_manager",
        "2025-04": "store_manager",
        "2025-05": "store_manager",
    }

    second = record("E001", "promotion", "2025-04-10", "supervisor")
    propagation.apply(second)
    assert positions_by_month() == {
        "2025-01": "specialist",
        "2025-02": "specialist",
        "2025-03": "store_manager",
        "2025-04": "supervisor",
        "2025-05": "supervisor",
    }


def test_promotion_applied_out_of_order_converges(ctx):
    seed_timeline()
    later = record("E001", "promotion", "2025-04-10", "supervisor")
    earlier = record("E001", "promotion", "2025-03-01", "store_manager")
    propagation.apply(later)
    propagation.apply(earlier)
    assert positions_by_month()["2025-03"] == "store_manager"
    assert positions_by_month()["2025-04"] == "supervisor"
    assert positions_by_month()["2025-05"] == "supervisor"


def test_apply_twice_is_idempotent(ctx):
    seed_timeline()
    movement = record("E001", "promotion", "2025-02-01", "store_manager")
    propagation.apply(movement)
    once = [s.to_dict() for s in snapshots_dao.list_employee_months("E001")]
    propagation.apply(movement)
    twice = [s.to_dict() for s in snapshots_dao.list_employee_months("E001")]
    assert once == twice


def test_promotion_refreshes_cached_stage(ctx):
    seed_timeline(position="newbie")
    assert snapshots_dao.get_snapshot("E001", "2025-05").stage == "pre-tier-1"
    propagation.apply(record("E001", "promotion", "2025-05-01", "specialist"))
    assert snapshots_dao.get_snapshot("E001", "2025-05").stage == "tier-3"


def test_leave_touches_only_effective_month(ctx):
    seed_timeline("E002")
    leave = record("E002", "leave_without_pay", "2025-03-01", "leave_without_pay")
    assert propagation.apply(leave) == ["2025-03"]

    march = snapshots_dao.get_snapshot("E002", "2025-03")
    april = snapshots_dao.get_snapshot("E002", "2025-04")
    assert march.employment_status == "leave_without_pay"
    assert march.monthly_status == "leave_without_pay"
    assert march.block == 3
    assert april.employment_status == "active"
    assert april.monthly_status == "full_month"
    assert april.block == 1

    back = record("E002", "return_to_work", "2025-04-07", "active")
    propagation.apply(back)
    april = snapshots_dao.get_snapshot("E002", "2025-04")
    assert april.monthly_status == "return_to_work"
    assert april.employment_status == "active"


def test_later_status_movement_in_same_month_wins(ctx):
    seed_timeline("E002")
    back = record("E002", "return_to_work", "2025-03-20", "active")
    leave = record("E002", "leave_without_pay", "2025-03-01", "leave_without_pay")
    propagation.apply(back)
    propagation.apply(leave)
    assert snapshots_dao.get_snapshot("E002", "2025-03").monthly_status == "return_to_work"


def test_missing_month_is_created_from_prior_month(ctx):
    propagation.write(
        MonthlySnapshot(
            employee_code="E003",
            year_month="2025-01",
            employee_name="Pharm",
            position="part_time_pharmacist",
            employment_type="part_time",
            is_pharmacist=True,
        )
    )
    propagation.apply(record("E003", "resignation", "2025-03-15", "resigned"))
    created = snapshots_dao.get_snapshot("E003", "2025-03")
    assert created is not None
    assert created.employment_type == "part_time"
    assert created.is_pharmacist is True
    assert created.monthly_status == "resigned"
    assert created.block == 5
    assert snapshots_dao.get_snapshot("E003", "2025-02") is None


def test_unknown_employee_gets_bare_snapshot(ctx):
    propagation.apply(record("E999", "promotion", "2025-06-01", "specialist"))
    snapshot = snapshots_dao.get_snapshot("E999", "2025-06")
    assert snapshot.position == "specialist"
    assert snapshot.employment_type is None
    assert snapshot.block == 0


def test_master_mirrors_latest_movement_only(ctx):
    employees_dao.upsert_employee(
        EmployeeMaster(employee_code="E004", employee_name="M", employment_type="full_time", current_position="specialist")
    )
    later = record("E004", "promotion", "2025-05-01", "supervisor")
    earlier = record("E004", "promotion", "2025-02-01", "store_manager")
    propagation.apply(later)
    propagation.apply(earlier)
    assert employees_dao.get_employee("E004").current_position == "supervisor"


def test_replay_rebuilds_timeline(ctx):
    seed_timeline()
    record("E001", "promotion", "2025-04-01", "supervisor")
    record("E001", "promotion", "2025-02-01", "store_manager")
    assert propagation.replay("E001") == 2
    assert positions_by_month() == {
        "2025-01": "specialist",
        "2025-02": "store_manager",
        "2025-03": "store_manager",
        "2025-04": "supervisor",
        "2025-05": "supervisor",
    }


def _gapped_timeline(code: str) -> None:
    for ym in ("2025-01", "2025-02"):
        propagation.write(
            MonthlySnapshot(
                employee_code=code,
                year_month=ym,
                employee_name="Gap",
                store_id="S1",
                position="specialist",
                employment_type="full_time",
                monthly_status="full_month",
                employment_status="active",
            )
        )


def _timeline(code: str) -> dict:
    return {
        s.year_month: (s.position, s.employment_status, s.monthly_status, s.block)
        for s in snapshots_dao.list_employee_months(code)
    }


def test_status_does_not_leak_into_created_months(ctx):
    _gapped_timeline("E010")
    propagation.apply(record("E010", "leave_without_pay", "2025-03-01", "leave_without_pay"))
    propagation.apply(record("E010", "promotion", "2025-04-01", "store_manager"))
    april = snapshots_dao.get_snapshot("E010", "2025-04")
    assert april.position == "store_manager"
    assert april.employment_status is None
    assert april.monthly_status is None


def test_timeline_independent_of_batch_order(ctx):
    _gapped_timeline("E011")
    propagation.apply(record("E011", "leave_without_pay", "2025-03-01", "leave_without_pay"))
    propagation.apply(record("E011", "promotion", "2025-04-01", "store_manager"))

    _gapped_timeline("E012")
    propagation.apply(record("E012", "promotion", "2025-04-01", "store_manager"))
    propagation.apply(record("E012", "leave_without_pay", "2025-03-01", "leave_without_pay"))

    assert _timeline("E011") == _timeline("E012")
    assert _timeline("E011")["2025-03"][1:3] == ("leave_without_pay", "leave_without_pay")
