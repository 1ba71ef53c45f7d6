"""
Tests for the oracle quorum tally.
"""

import pytest

from urauth.core import ConflictError, ErrorCode, VerificationSubmission, quorum_threshold
from urauth.schemas import VerificationResult


class TestThreshold:

    def test_thresholds_for_one_to_five_members(self):
        assert [quorum_threshold(n) for n in range(1, 6)] == [1, 2, 2, 3, 3]

    def test_zero_members(self):
        assert quorum_threshold(0) == 0

    def test_larger_memberships_round_up(self):
        assert quorum_threshold(10) == 6
        assert quorum_threshold(7) == 5


class TestVerificationSubmission:

    def test_single_member_completes_immediately(self):
        submission = VerificationSubmission()
        assert submission.submit(1, "a", "d1") == VerificationResult.COMPLETE

    def test_completes_exactly_at_threshold(self):
        submission = VerificationSubmission()
        assert submission.submit(5, "a", "d1") == VerificationResult.IN_PROGRESS
        assert submission.submit(5, "b", "d1") == VerificationResult.IN_PROGRESS
        assert submission.submit(5, "c", "d1") == VerificationResult.COMPLETE
        assert submission.threshold == 3
        assert submission.tally == {"d1": 3}

    def test_distinct_digests_tie(self):
        submission = VerificationSubmission()
        assert submission.submit(3, "a", "d1") == VerificationResult.IN_PROGRESS
        assert submission.submit(3, "b", "d2") == VerificationResult.IN_PROGRESS
        assert submission.submit(3, "c", "d3") == VerificationResult.TIE

    def test_split_vote_can_still_complete(self):
        submission = VerificationSubmission()
        assert submission.submit(5, "a", "d1") == VerificationResult.IN_PROGRESS
        assert submission.submit(5, "b", "d2") == VerificationResult.IN_PROGRESS
        assert submission.submit(5, "c", "d1") == VerificationResult.IN_PROGRESS
        assert submission.submit(5, "d", "d1") == VerificationResult.COMPLETE

    def test_threshold_follows_membership(self):
        """Threshold is recomputed from the member count on every submission."""
        submission = VerificationSubmission()
        submission.submit(5, "a", "d1")
        assert submission.threshold == 3
        assert submission.submit(2, "b", "d1") == VerificationResult.COMPLETE
        assert submission.threshold == 2

    def test_member_votes_once(self):
        submission = VerificationSubmission()
        submission.submit(5, "a", "d1")
        with pytest.raises(ConflictError) as exc:
            submission.submit(5, "a", "d1")
        assert exc.value.code == ErrorCode.ALREADY_SUBMITTED
        assert submission.voters == ["a"]
