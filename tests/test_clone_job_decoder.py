"""Tests for decoding push-delivered clone job messages."""
import base64
import json

import pytest

from liftlog.core.exceptions import DecodeError, ValidationError
from liftlog.models import ProgramType
from liftlog.schemas.clone_job import CloneJob
from liftlog.services.clone_job_decoder import decode_push_payload, encode_push_payload
from tests.factories import cardio_job, push_body, strength_job


def _envelope_with_raw_data(raw: bytes) -> dict:
    return {"message": {"data": base64.b64encode(raw).decode("ascii")}}


class TestEnvelope:
    def test_accepts_raw_body_bytes(self):
        body = json.dumps(push_body(strength_job("prog-1"))).encode("utf-8")

        job = decode_push_payload(body)

        assert job.program_id == "prog-1"
        assert job.user_id == "user-1"
        assert job.program_type == ProgramType.STRENGTH

    @pytest.mark.parametrize(
        "payload",
        [{}, {"message": {}}, {"message": {"data": ""}}, {"message": "abc"}],
    )
    def test_missing_message_data(self, payload):
        with pytest.raises(DecodeError) as exc_info:
            decode_push_payload(payload)

        assert exc_info.value.code == "DEC_MISSING_MESSAGE"
        assert exc_info.value.message == "missing message"

    def test_body_not_json(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_push_payload(b"not json at all")

        assert exc_info.value.code == "DEC_BODY"

    def test_body_not_object(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_push_payload(b"[1, 2, 3]")

        assert exc_info.value.code == "DEC_BODY"

    def test_data_not_string(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_push_payload({"message": {"data": 42}})

        assert exc_info.value.code == "DEC_DATA_TYPE"

    def test_data_not_base64(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_push_payload({"message": {"data": "%%%not-base64%%%"}})

        assert exc_info.value.code == "DEC_BASE64"

    def test_urlsafe_unpadded_data(self):
        raw = json.dumps(strength_job("prog-1", weeks=3)).encode("utf-8")
        data = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

        job = decode_push_payload({"message": {"data": data}})

        assert job.program_id == "prog-1"

    def test_line_wrapped_data(self):
        raw = json.dumps(strength_job("prog-1", weeks=3)).encode("utf-8")
        data = base64.encodebytes(raw).decode("ascii")

        assert "\n" in data.strip()
        assert decode_push_payload({"message": {"data": data}}).program_id == "prog-1"

    def test_decoded_data_not_json(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_push_payload(_envelope_with_raw_data(b"{broken"))

        assert exc_info.value.code == "DEC_JSON"

    def test_decoded_data_not_utf8(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_push_payload(_envelope_with_raw_data(b"\xff\xfe\xfa"))

        assert exc_info.value.code == "DEC_JSON"


class TestJobFields:
    @pytest.mark.parametrize("missing", ["programId", "userId", "programType"])
    def test_required_field_missing(self, missing):
        document = strength_job("prog-1")
        del document[missing]

        with pytest.raises(ValidationError) as exc_info:
            decode_push_payload(push_body(document))

        assert exc_info.value.details["field"] == missing

    def test_unknown_program_type(self):
        document = strength_job("prog-1")
        document["programType"] = "yoga"

        with pytest.raises(ValidationError) as exc_info:
            decode_push_payload(push_body(document))

        assert exc_info.value.details["field"] == "programType"

    def test_requires_source_data_or_source_program(self):
        document = strength_job("prog-1")
        del document["sourceData"]

        with pytest.raises(ValidationError) as exc_info:
            decode_push_payload(push_body(document))

        assert exc_info.value.code == "VAL_JOB_001"
        assert "sourceProgramId" in exc_info.value.message

    def test_source_program_id_alone_is_enough(self):
        document = strength_job("prog-1")
        del document["sourceData"]
        document["sourceProgramId"] = "prog-0"

        job = decode_push_payload(push_body(document))

        assert job.source_data is None
        assert job.source_program_id == "prog-0"

    def test_program_data_alias(self):
        document = strength_job("prog-1", weeks=3)
        document["programData"] = document.pop("sourceData")

        job = decode_push_payload(push_body(document))

        assert [w.week_number for w in job.source_data.weeks] == [1, 2, 3]

    def test_duplicate_week_numbers_rejected(self):
        document = strength_job("prog-1", weeks=2)
        document["sourceData"]["weeks"][1]["weekNumber"] = 1

        with pytest.raises(ValidationError) as exc_info:
            decode_push_payload(push_body(document))

        assert "duplicate weekNumber 1" in exc_info.value.message

    def test_week_number_must_be_positive(self):
        document = strength_job("prog-1", weeks=1)
        document["sourceData"]["weeks"][0]["weekNumber"] = 0

        with pytest.raises(ValidationError) as exc_info:
            decode_push_payload(push_body(document))

        assert exc_info.value.details["field"].endswith("weekNumber")

    def test_numeric_reps_become_text(self):
        job = decode_push_payload(push_body(strength_job("prog-1", weeks=1)))

        sets = job.source_data.weeks[0].workouts[0].exercises[0].prescribed_sets
        assert [s.reps for s in sets] == ["8", "8-10"]
        assert sets[0].rpe == 7.5
        assert sets[1].rir == 2

    def test_cardio_session_fields(self):
        job = decode_push_payload(push_body(cardio_job("cardio-1", weeks=1)))

        session = job.source_data.weeks[0].sessions[0]
        assert job.program_type == ProgramType.CARDIO
        assert session.target_hr_range == "130-145"
        assert session.target_duration == 46


def test_encode_produces_decodable_envelope():
    job = CloneJob.model_validate(cardio_job("cardio-1", weeks=2))

    envelope = encode_push_payload(job)
    decoded = decode_push_payload(envelope)

    assert decoded == job
    assert "targetHRRange" in base64.b64decode(envelope["message"]["data"]).decode("utf-8")
