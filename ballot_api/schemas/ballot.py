"""Ballot request and response schemas."""

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class CandidateCreate(BaseModel):
    """Request body for registering a candidate."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    owner_address: str | None = Field(default=None, alias="ownerAddress")


class VoteCreate(BaseModel):
    """Request body for casting a vote."""

    model_config = ConfigDict(populate_by_name=True)

    voter_address: str | None = Field(default=None, alias="voterAddress")
    candidate_index: StrictInt | None = Field(default=None, alias="candidateIndex")


class TransactionResponse(BaseModel):
    """Acknowledgement of a mined write."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    transaction_hash: str = Field(alias="transactionHash")


class CandidateCreatedResponse(TransactionResponse):
    """Acknowledgement of a candidate registration."""

    name: str


class CandidateResponse(BaseModel):
    """A candidate and its tally; counts are decimal strings."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    vote_count: str = Field(alias="voteCount")


class WinnerResponse(BaseModel):
    """The contract's reported leader."""

    winner: str


class ResultsResponse(BaseModel):
    """Derived election snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    candidates: list[CandidateResponse] = Field(default_factory=list)
    total_votes: str = Field(alias="totalVotes")
    winner: str | None = None


class VoterStatusResponse(BaseModel):
    """Whether an address has already voted."""

    model_config = ConfigDict(populate_by_name=True)

    voter_address: str = Field(alias="voterAddress")
    has_voted: bool = Field(alias="hasVoted")
