import base64

from pydantic import ValidationError
import pytest

from dotcode_scanner.core.exceptions import ErrorKind, ExtractionError, ScanError
from dotcode_scanner.core.types import (
    AnalysisResult,
    Confidence,
    Failure,
    ImageInput,
    ScannedItem,
    Success,
)

pytestmark = pytest.mark.unit


class TestScannedItem:
    def test_accepts_wire_names(self):
        item = ScannedItem.model_validate(
            {
                "dotCode": "VR12 345",
                "manufacturingDate": "06/09/25",
                "price": "170.00",
                "confidence": "High",
                "rawText": "VR12 345 MFD 06/09/25",
            }
        )
        assert item.dot_code == "VR12 345"
        assert item.manufacturing_date == "06/09/25"
        assert item.price == "170.00"
        assert item.confidence is Confidence.HIGH
        assert item.raw_text == "VR12 345 MFD 06/09/25"

    def test_optional_fields_default_to_none(self):
        item = ScannedItem(dot_code="HCN1", confidence=Confidence.LOW)
        assert item.manufacturing_date is None
        assert item.price is None
        assert item.raw_text is None

    def test_numeric_price_is_coerced_to_text(self):
        item = ScannedItem.model_validate(
            {"dotCode": "A1", "confidence": "Medium", "price": 170}
        )
        assert item.price == "170"

    def test_confidence_is_case_insensitive(self):
        item = ScannedItem.model_validate({"dotCode": "A1", "confidence": "medium"})
        assert item.confidence is Confidence.MEDIUM

    def test_unknown_confidence_is_rejected(self):
        with pytest.raises(ValidationError):
            ScannedItem.model_validate({"dotCode": "A1", "confidence": "Certain"})

    def test_missing_code_is_rejected(self):
        with pytest.raises(ValidationError):
            ScannedItem.model_validate({"confidence": "High"})

    def test_items_are_immutable(self):
        item = ScannedItem(dot_code="A1", confidence=Confidence.HIGH)
        with pytest.raises(ValidationError):
            item.dot_code = "B2"  # type: ignore[misc]


class TestAnalysisResult:
    def test_items_become_a_tuple(self):
        result = AnalysisResult.model_validate(
            {"items": [{"dotCode": "A1", "confidence": "High"}], "summary": "one"}
        )
        assert isinstance(result.items, tuple)
        assert result.items[0].dot_code == "A1"

    def test_summary_is_required(self):
        with pytest.raises(ValidationError):
            AnalysisResult.model_validate({"items": []})


class TestImageInput:
    def test_rejects_empty_data(self):
        with pytest.raises(ValueError, match="data"):
            ImageInput(data=b"")

    def test_rejects_non_bytes(self):
        with pytest.raises(TypeError):
            ImageInput(data="not bytes")  # type: ignore[arg-type]

    def test_rejects_non_image_mime(self):
        with pytest.raises(ValueError, match="mime_type"):
            ImageInput(data=b"x", mime_type="application/pdf")

    def test_repr_does_not_dump_bytes(self):
        image = ImageInput(data=b"\x00" * 2048, label="shelf.jpg")
        text = repr(image)
        assert "size=2048" in text
        assert "shelf.jpg" in text
        assert "\\x00" not in text

    def test_from_file_guesses_mime_type(self, tmp_path):
        path = tmp_path / "pack.png"
        path.write_bytes(b"\x89PNG fake")
        image = ImageInput.from_file(path)
        assert image.mime_type == "image/png"
        assert image.label == "pack.png"
        assert image.data == b"\x89PNG fake"

    def test_from_file_requires_existing_path(self, tmp_path):
        with pytest.raises(ValueError, match="path"):
            ImageInput.from_file(tmp_path / "missing.jpg")

    def test_from_data_url_strips_header(self):
        encoded = base64.b64encode(b"webp-bytes").decode()
        image = ImageInput.from_data_url(f"data:image/webp;base64,{encoded}")
        assert image.data == b"webp-bytes"
        assert image.mime_type == "image/webp"

    def test_from_data_url_accepts_bare_base64(self):
        encoded = base64.b64encode(b"jpeg-bytes").decode()
        image = ImageInput.from_data_url(encoded)
        assert image.data == b"jpeg-bytes"
        assert image.mime_type == "image/jpeg"

    def test_from_data_url_rejects_garbage(self):
        with pytest.raises(ValueError, match="base64"):
            ImageInput.from_data_url("data:image/jpeg;base64,@@not-base64@@")


class TestResultsAndErrors:
    def test_success_and_failure_are_frozen(self):
        ok = Success(1)
        bad = Failure(ValueError("x"))
        with pytest.raises(AttributeError):
            ok.value = 2  # type: ignore[misc]
        with pytest.raises(AttributeError):
            bad.error = ValueError("y")  # type: ignore[misc]

    def test_extraction_error_keeps_kind_and_cause(self):
        cause = OSError("reset")
        err = ExtractionError(ErrorKind.TRANSPORT_FAILURE, "boom", cause=cause)
        assert str(err) == "boom"
        assert err.kind is ErrorKind.TRANSPORT_FAILURE
        assert err.cause is cause

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (ErrorKind.CREDENTIAL_REQUIRED, True),
            (ErrorKind.MISSING_CREDENTIAL, True),
            (ErrorKind.AUTH_REJECTED, True),
            (ErrorKind.MODEL_UNAVAILABLE, True),
            (ErrorKind.NETWORK_ERROR, False),
            (ErrorKind.ANALYSIS_FAILED, False),
            (ErrorKind.NO_USABLE_RESULTS, False),
            (ErrorKind.OFFLINE, False),
        ],
    )
    def test_scan_error_requires_credential(self, kind, expected):
        assert ScanError(kind, "msg").requires_credential is expected

    def test_scan_error_keeps_details_out_of_message(self):
        err = ScanError(ErrorKind.ANALYSIS_FAILED, "short", details="long cause")
        assert str(err) == "short"
        assert err.details == "long cause"
