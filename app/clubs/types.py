"""Club identity data types shared by providers and the resolver."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional


class ClubType(str, Enum):
    FOOTBALL = "football"
    FUTSAL = "futsal"


@dataclass(frozen=True)
class ClubIdentity:
    """A club as returned by one provider.

    ``id`` is only unique within the namespace of the provider that produced it.
    """

    id: str
    name: str
    city: str = ""
    type: str = ClubType.FOOTBALL.value
    website: str = ""
    logo_url: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


class ProviderStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    TRANSIENT_FAILURE = "transient_failure"


@dataclass
class ProviderResult:
    """Outcome of one provider call.

    Providers never raise to the resolver; a failure is reported here as
    ``TRANSIENT_FAILURE`` with the reason in ``error``.
    """

    provider: str
    status: ProviderStatus
    clubs: list[ClubIdentity] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ProviderStatus.SUCCESS

    @classmethod
    def success(cls, provider: str, clubs: list[ClubIdentity]) -> "ProviderResult":
        if not clubs:
            return cls(provider=provider, status=ProviderStatus.EMPTY)
        return cls(provider=provider, status=ProviderStatus.SUCCESS, clubs=list(clubs))

    @classmethod
    def empty(cls, provider: str) -> "ProviderResult":
        return cls(provider=provider, status=ProviderStatus.EMPTY)

    @classmethod
    def failure(cls, provider: str, error: str) -> "ProviderResult":
        return cls(provider=provider, status=ProviderStatus.TRANSIENT_FAILURE, error=error)
