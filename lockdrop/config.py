from dataclasses import dataclass

from algosdk.encoding import is_valid_address

from lockdrop.constants import MAX_UINT32, MAX_UINT64, MAX_UINT128


@dataclass(frozen=True)
class ProgramConfig:
    """
    Construction parameters of a lockdrop program.

    program_duration and vesting_duration are in seconds; the program ends
    program_duration seconds after the application is created.
    annual_yield_rate is an integer multiplier used by the reward point formula.
    """
    reward_asset: object
    program_duration: int
    reward_pool_size: int
    vesting_duration: int
    manager_address: str
    annual_yield_rate: int

    def __post_init__(self):
        if not is_valid_address(self.manager_address):
            raise ValueError(f"Invalid manager address: {self.manager_address!r}")
        if not 0 < self.program_duration <= MAX_UINT32:
            raise ValueError("program_duration must be a positive 32-bit number of seconds")
        if not 0 < self.vesting_duration <= MAX_UINT64:
            raise ValueError("vesting_duration must be positive")
        if not 0 < self.reward_pool_size <= MAX_UINT128:
            raise ValueError("reward_pool_size must be positive")
        if not 0 < self.annual_yield_rate <= MAX_UINT64:
            raise ValueError("annual_yield_rate must be positive")
