# (c) Copyright Datacraft, 2026
"""Tests for the outward result forms and status mapping."""
from trustdoc.core.exceptions import DocumentNotFoundError, ForbiddenError, IngestValidationError
from trustdoc.core.features.custody import (
    DeleteResult,
    Hashed,
    IngestFailure,
    IngestResponse,
    http_status_for,
    status_for_error,
)
from trustdoc.core.hasher import HashTimeoutError
from trustdoc.core.types import CustodyBackend, DeletionStatus, IngestStage, IngestStatus


def test_failure_response_carries_stage_and_code_only():
    failure = IngestFailure(
        stage=IngestStage.HASH,
        error=HashTimeoutError("Hash computation timed out after 30s"),
        progress=None,
    )
    response = IngestResponse.from_result(failure)

    assert response.status == IngestStatus.FAILURE
    assert response.stage == IngestStage.HASH
    assert response.error.backend == CustodyBackend.HASHER
    assert response.model_dump(exclude_none=True)["error"] == {
        "backend": "hasher",
        "code": "HashTimeout",
        "message": "Hash computation timed out after 30s",
    }
    assert http_status_for(response) == 504


def test_failure_after_hashing_reports_hash():
    failure = IngestFailure(
        stage=IngestStage.CONTENT,
        error=IngestValidationError("bad"),
        progress=Hashed(content_hash="a" * 64),
    )
    response = IngestResponse.from_result(failure)
    assert response.content_hash == "a" * 64
    assert response.content_address is None


def test_status_for_error():
    assert status_for_error(DocumentNotFoundError("x")) == 404
    assert status_for_error(ForbiddenError("no")) == 403
    assert http_status_for(DeleteResult(status=DeletionStatus.PARTIAL)) == 207
