"""Fee split result type."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FeeSplit:
    """How one gross amount is divided between collector, backing and user.

    Attributes:
        gross: The amount the split was taken from
        to_collector: Paid out to the fee collector
        to_backing: Kept in (or added to) the reserve backing
        net: Remainder: priced into tokens on mint, paid to the user on burn

    Examples:
        split = FeeSplit(gross=1_000_000_000, to_collector=500_000,
                         to_backing=500_000, net=999_000_000)
        assert split.total == 1_000_000
    """

    gross: int
    to_collector: int
    to_backing: int
    net: int

    @property
    def total(self) -> int:
        """Total fee taken (both legs)."""
        return self.to_collector + self.to_backing

    @property
    def is_zero(self) -> bool:
        return self.total == 0
