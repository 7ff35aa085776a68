"""Tests for completion response parsing."""

from __future__ import annotations

import pytest


@pytest.mark.unit
class TestExtractJsonObject:
    """Tests for recovering JSON objects from completions."""

    def test_plain_json(self) -> None:
        """Test parsing a bare JSON object."""
        from litestar_chatflow.dialog.parsing import extract_json_object

        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_code_fence(self) -> None:
        """Test a markdown code fence is stripped."""
        from litestar_chatflow.dialog.parsing import extract_json_object

        raw = '```json\n{"isComplete": true}\n```'

        assert extract_json_object(raw) == {"isComplete": True}

    def test_surrounding_prose(self) -> None:
        """Test JSON embedded in prose is recovered."""
        from litestar_chatflow.dialog.parsing import extract_json_object

        raw = 'Sure! Here is the result: {"asset": "Hello {world}"} Let me know.'

        assert extract_json_object(raw) == {"asset": "Hello {world}"}

    @pytest.mark.parametrize("raw", ["", "no json here", "{broken", "[1, 2, 3]", '"just a string"'])
    def test_malformed(self, raw: str) -> None:
        """Test unrecoverable text raises MalformedResponseError."""
        from litestar_chatflow.dialog.parsing import extract_json_object
        from litestar_chatflow.exceptions import MalformedResponseError

        with pytest.raises(MalformedResponseError) as exc_info:
            extract_json_object(raw)

        assert exc_info.value.raw == raw

    def test_strip_code_fences_without_fence(self) -> None:
        """Test text without a fence is only trimmed."""
        from litestar_chatflow.dialog.parsing import strip_code_fences

        assert strip_code_fences("  plain text \n") == "plain text"


@pytest.mark.unit
class TestDialogResponse:
    """Tests for the JSON dialog contract."""

    def test_full_response(self) -> None:
        """Test parsing a complete dialog response."""
        from litestar_chatflow.dialog.parsing import DialogResponse, parse_response

        raw = (
            '{"isComplete": false, "collectedInformation": {"companyName": "Acme"}, '
            '"missingInformation": ["announcement"], "nextQuestion": "What are you announcing?", '
            '"suggestedNextStep": null, "readyToGenerate": false}'
        )

        response = parse_response(raw, DialogResponse)

        assert response.is_complete is False
        assert response.collected_information == {"companyName": "Acme"}
        assert response.missing_information == ["announcement"]
        assert response.next_question == "What are you announcing?"

    def test_legacy_aliases(self) -> None:
        """Test isStepComplete and extractedInformation are accepted."""
        from litestar_chatflow.dialog.parsing import DialogResponse, parse_response

        response = parse_response('{"isStepComplete": true, "extractedInformation": {"a": 1}}', DialogResponse)

        assert response.is_complete is True
        assert response.collected_information == {"a": 1}

    def test_lenient_optional_fields(self) -> None:
        """Test null and string values of optional fields are coerced."""
        from litestar_chatflow.dialog.parsing import DialogResponse, parse_response

        raw = (
            '{"isComplete": false, "collectedInformation": {}, "missingInformation": "quote", '
            '"nextQuestion": "  ", "readyToGenerate": null}'
        )

        response = parse_response(raw, DialogResponse)

        assert response.collected_information == {}
        assert response.missing_information == ["quote"]
        assert response.next_question is None
        assert response.ready_to_generate is False

    @pytest.mark.parametrize(
        "raw",
        [
            '{"collectedInformation": {}}',
            '{"isComplete": "maybe", "collectedInformation": {}}',
            '{"isComplete": true}',
            '{"isComplete": true, "collectedInformation": null}',
            '{"isComplete": true, "collectedInformation": ["Acme"]}',
        ],
    )
    def test_contract_violation(self, raw: str) -> None:
        """Test a missing or wrong-typed isComplete or collectedInformation violates the contract."""
        from litestar_chatflow.dialog.parsing import DialogResponse, parse_response
        from litestar_chatflow.exceptions import MalformedResponseError

        with pytest.raises(MalformedResponseError):
            parse_response(raw, DialogResponse)


@pytest.mark.unit
class TestReviewResponse:
    """Tests for the review and asset contracts."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("approved", "approved"),
            ("Approve", "approved"),
            ("revision_requested", "revision_requested"),
            ("revision requested", "revision_requested"),
            ("changes-requested", "revision_requested"),
            ("hmm", "unclear"),
        ],
    )
    def test_decision_mapping(self, value: str, expected: str) -> None:
        """Test free-form decisions map onto ReviewDecision."""
        from litestar_chatflow.dialog.parsing import ReviewInformation

        assert ReviewInformation(reviewDecision=value).decision == expected

    def test_review_response(self) -> None:
        """Test parsing a review response with a single change string."""
        from litestar_chatflow.dialog.parsing import ReviewResponse, parse_response

        raw = (
            '{"isComplete": false, "collectedInformation": {"reviewDecision": "revision_requested", '
            '"requestedChanges": "Shorten the headline"}}'
        )

        response = parse_response(raw, ReviewResponse)

        assert response.collected_information.requested_changes == ["Shorten the headline"]

    def test_empty_asset_rejected(self) -> None:
        """Test an empty asset violates the asset contract."""
        from litestar_chatflow.dialog.parsing import AssetResponse, parse_response
        from litestar_chatflow.exceptions import MalformedResponseError

        with pytest.raises(MalformedResponseError):
            parse_response('{"asset": ""}', AssetResponse)
