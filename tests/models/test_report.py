import json

import pytest

from flatdir.exceptions import (
    BackendUnavailableException,
    ErrorKind,
    OperationFailedException,
    PartialFailureException,
)
from flatdir.models.report import (
    DeleteReport,
    KeyOutcome,
    NodeOutcome,
    OperationStatus,
    RenameReport,
    TransferReport,
    UploadReport,
)


def _failed(key: str, **kwargs) -> KeyOutcome:
    outcome = KeyOutcome(key=key, **kwargs)
    outcome.fail(BackendUnavailableException(f"{key} unavailable"))
    return outcome


def test_delete_report_status() -> None:
    ok = NodeOutcome(key="a.txt", keys=[KeyOutcome(key="a.txt", removed=True)])
    bad = NodeOutcome(key="b.txt", keys=[_failed("b.txt")])

    assert DeleteReport(nodes=[ok]).status == OperationStatus.SUCCEEDED
    assert DeleteReport(nodes=[]).status == OperationStatus.SUCCEEDED

    partial = DeleteReport(nodes=[ok, bad])
    assert partial.status == OperationStatus.PARTIAL
    assert partial.succeeded_nodes == ["a.txt"]
    assert partial.failed_nodes == ["b.txt"]
    assert partial.failed_keys == ["b.txt"]

    assert DeleteReport(nodes=[bad]).status == OperationStatus.FAILED


def test_node_level_failure() -> None:
    node = NodeOutcome(
        key="docs",
        is_folder=True,
        error_kind=ErrorKind.BACKEND_UNAVAILABLE,
        error_msg="listing failed",
    )
    assert not node.success
    assert node.failed_keys == ["docs"]


def test_transfer_report_status() -> None:
    moved = KeyOutcome(key="a", new_key="b", written=True, removed=True)
    stuck = _failed("c", new_key="d")
    copied_not_removed = _failed("e", new_key="f", written=True)

    assert TransferReport(keys=[moved]).status == OperationStatus.SUCCEEDED
    assert TransferReport(keys=[moved, stuck]).status == OperationStatus.PARTIAL
    assert TransferReport(keys=[stuck]).status == OperationStatus.FAILED
    # The destination was written, so the store did change
    assert (
        TransferReport(keys=[copied_not_removed]).status == OperationStatus.PARTIAL
    )

    report = TransferReport(key="docs", keys=[moved])
    report.fail(BackendUnavailableException("boom"))
    assert report.status == OperationStatus.FAILED
    assert report.failed_keys == ["docs"]


def test_raise_for_status() -> None:
    UploadReport(keys=[KeyOutcome(key="a", written=True)]).raise_for_status()

    partial = UploadReport(keys=[KeyOutcome(key="a", written=True), _failed("b")])
    with pytest.raises(PartialFailureException) as exc_info:
        partial.raise_for_status()
    assert exc_info.value.report is partial
    assert exc_info.value.kind == ErrorKind.PARTIAL_FAILURE

    failed = UploadReport(keys=[_failed("b")])
    with pytest.raises(OperationFailedException) as exc_info2:
        failed.raise_for_status()
    assert exc_info2.value.report is failed


def test_report_serialization() -> None:
    report = RenameReport(
        key="docs/a.txt",
        new_key="docs/b.txt",
        new_name="b.txt",
        keys=[_failed("docs/a.txt", new_key="docs/b.txt")],
    )
    data = json.loads(report.to_json())

    assert data["newKey"] == "docs/b.txt"
    assert data["newName"] == "b.txt"
    assert data["isFolder"] is False
    assert "errorKind" not in data
    assert data["keys"][0]["errorKind"] == "BackendUnavailable"
    assert data["keys"][0]["newKey"] == "docs/b.txt"
