"""
Oracle Quorum

Oracle members observe a claimant's published challenge and each submit
the digest of what they saw. A URI is verified once enough members agree
on the same digest.

THRESHOLD:
    ceil(3n / 5), recomputed on every submission from the current
    member count n. For n = 1..5: 1, 2, 2, 3, 3.

OUTCOME of a submission:
- Complete:   the digest's tally reached the threshold (or threshold is 1)
- Tie:        every member has voted and no digest won
- InProgress: otherwise
"""

from pydantic import BaseModel, Field

from ..schemas import VerificationResult
from .errors import ConflictError, ErrorCode


def quorum_threshold(member_count: int) -> int:
    """ceil(3n/5) in integer arithmetic."""
    scaled = 3 * member_count
    return scaled // 5 + (1 if scaled % 5 else 0)


class VerificationSubmission(BaseModel):
    """Running tally for one pending URI."""
    voters: list[str] = Field(
        default_factory=list,
        description="Accounts of members who have submitted"
    )
    tally: dict[str, int] = Field(
        default_factory=dict,
        description="Digest (hex) -> number of submissions"
    )
    threshold: int = Field(default=1, ge=0)

    def submit(self, member_count: int, member: str, digest: str) -> VerificationResult:
        """
        Record one member's digest.

        Raises:
            ConflictError(AlreadySubmitted): member already voted on this URI
        """
        if member in self.voters:
            raise ConflictError(ErrorCode.ALREADY_SUBMITTED, f"{member} already submitted")

        self.voters.append(member)
        self.threshold = quorum_threshold(member_count)
        count = self.tally.get(digest, 0) + 1
        self.tally[digest] = count

        if count >= self.threshold or self.threshold == 1:
            return VerificationResult.COMPLETE
        if len(self.voters) == member_count:
            return VerificationResult.TIE
        return VerificationResult.IN_PROGRESS
