"""Unit tests for check recording and response shape classification."""

from tsdb_loadgen.services.checks import (
    CheckType,
    check_counts,
    check_rate,
    query_result_is_vector,
    record_check,
)


class TestRecordCheck:
    """Tests for check counters.

    Counters are process wide, so assertions compare before/after deltas.
    """

    def test_record_pass_and_fail(self):
        """Passes and failures are counted separately per type."""
        passed_before, failed_before = check_counts(CheckType.WRITE)

        assert record_check(CheckType.WRITE, True) is True
        assert record_check(CheckType.WRITE, False) is False

        passed_after, failed_after = check_counts(CheckType.WRITE)
        assert passed_after - passed_before == 1
        assert failed_after - failed_before == 1

    def test_types_are_independent(self):
        """A read check does not move the write counters."""
        write_before = check_counts(CheckType.WRITE)

        record_check(CheckType.READ, True)

        assert check_counts(CheckType.WRITE) == write_before

    def test_check_rate(self):
        """check_rate is the passed fraction."""
        record_check(CheckType.READ, True)

        rate = check_rate(CheckType.READ)

        assert rate is not None
        assert 0.0 <= rate <= 1.0


class TestQueryResultIsVector:
    """Tests for query_result_is_vector."""

    def test_success_vector(self, vector_payload):
        """A successful vector result passes."""
        assert query_result_is_vector(vector_payload) is True

    def test_error_status(self):
        """An error status fails."""
        assert query_result_is_vector({"status": "error", "data": {"resultType": "vector"}}) is False

    def test_matrix_result(self):
        """A non-vector result type fails."""
        assert query_result_is_vector({"status": "success", "data": {"resultType": "matrix"}}) is False

    def test_missing_data(self):
        """A body without data fails."""
        assert query_result_is_vector({"status": "success"}) is False

    def test_not_a_mapping(self):
        """Non-object bodies fail."""
        assert query_result_is_vector(["success"]) is False
        assert query_result_is_vector(None) is False
