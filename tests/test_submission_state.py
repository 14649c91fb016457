import pytest

from otcswap.errors import InvalidInput, LedgerTransportError
from otcswap.execution.submission import Submission, SubmissionState


def test_full_pipeline_transitions() -> None:
    sub = Submission("fill_order")
    assert sub.state is SubmissionState.VALIDATING
    sub.advance(SubmissionState.APPROVING)
    sub.advance(SubmissionState.SUBMITTING)
    sub.advance(SubmissionState.CONFIRMING)
    sub.advance(SubmissionState.EXTRACTING_EVENT)
    sub.advance(SubmissionState.DONE)
    assert sub.finished
    assert sub.history[0] is SubmissionState.VALIDATING
    assert sub.history[-1] is SubmissionState.DONE


def test_approval_is_optional() -> None:
    sub = Submission("cancel_order")
    sub.advance(SubmissionState.SUBMITTING)
    assert sub.step == "submitting"


def test_illegal_transition() -> None:
    sub = Submission("create_order")
    with pytest.raises(RuntimeError):
        sub.advance(SubmissionState.CONFIRMING)


def test_fail_stamps_error_with_step() -> None:
    sub = Submission("create_order")
    sub.advance(SubmissionState.APPROVING)
    err = sub.fail(LedgerTransportError("boom"))
    assert err.operation == "create_order"
    assert err.step == "approving"
    assert sub.state is SubmissionState.FAILED
    assert sub.failed_at is SubmissionState.APPROVING
    assert sub.failure_kind == "transport"
    assert err.history == [SubmissionState.VALIDATING, SubmissionState.APPROVING, SubmissionState.FAILED]


def test_failure_before_approval_is_distinguishable() -> None:
    sub = Submission("create_order")
    err = sub.fail(InvalidInput("cannot swap same token"))
    assert err.step == "validating"
    assert SubmissionState.APPROVING not in err.history
    assert str(err) == "create_order failed at validating: cannot swap same token"
