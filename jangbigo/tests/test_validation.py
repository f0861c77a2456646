import pytest

from jangbigo.errors import FieldError, ValidationError, merge_field_errors
from jangbigo.schemas import JobPostCreate, JobPostUpdate
from jangbigo.validation import validate_job_post


def test_merge_keeps_first_message_per_field():
    merged = merge_field_errors(
        [FieldError("workFloor", "too high")],
        [FieldError("workFloor", "Work floor is required"), FieldError("siteAddress", "Site address is required")],
    )
    assert merged == [FieldError("workFloor", "too high"), FieldError("siteAddress", "Site address is required")]


def test_non_object_body_is_rejected():
    with pytest.raises(ValidationError) as info:
        validate_job_post(JobPostCreate, ["not", "an", "object"])
    assert info.value.errors[0].field == "body"


def test_errors_use_wire_names():
    with pytest.raises(ValidationError) as info:
        validate_job_post(JobPostCreate, {"type": "GLOBAL", "category": "LADDER", "luggageVolume": "3 ton"})
    fields = [e.field for e in info.value.errors]
    assert fields[0] == "luggageVolume"
    assert "ladderType" in fields
    assert "ladder_type" not in fields


def test_bad_arrival_time_message():
    with pytest.raises(ValidationError) as info:
        validate_job_post(JobPostCreate, {"type": "GLOBAL", "category": "SKY", "arrivalTime": "25:00"})
    messages = {e.field: e.message for e in info.value.errors}
    assert messages["arrivalTime"] == 'Invalid arrival time format. Use format like "6:30" or "14:30"'


def test_update_checks_merged_candidate():
    stored = {
        "post_type": "GLOBAL",
        "category": "SKY",
        "equipment_type": "1 ton",
        "equipment_lengths": [16],
        "work_contents": "x",
        "work_cost": 1.0,
        "payment_method": "CASH",
        "expected_payment_date": "today",
        "with_fee": False,
        "site_address": "a",
        "contact_number": "b",
        "delivery_info": "c",
    }
    _, submitted = validate_job_post(JobPostUpdate, {"workCost": 2}, base=stored)
    assert submitted == {"work_cost": 2.0}

    with pytest.raises(ValidationError) as info:
        validate_job_post(JobPostUpdate, {"equipmentType": "2.5 ton"}, base=stored)
    assert info.value.errors[0].field == "equipmentLengths"
