from dataclasses import dataclass
from datetime import datetime, timezone

from algosdk.encoding import encode_address

from lockdrop.constants import *
from lockdrop.exceptions import PreconditionError, ArithmeticGuardError


def get_current_timestamp():
    return int(datetime.now(tz=timezone.utc).timestamp())


def get_locking_cap(duration):
    days = duration // DAY
    for first_day, last_day, cap in LOCKING_TIERS:
        if first_day <= days <= last_day:
            return cap
    raise PreconditionError("invalid locking period")


def calculate_reward_points(amount, duration, annual_yield_rate):
    reward_points = (amount * annual_yield_rate * duration) // DAYS_PER_YEAR
    if reward_points == 0:
        raise PreconditionError("zero reward points")
    return reward_points


def calculate_reward_share(reward_pool_size, reward_points, total_reward_points):
    if total_reward_points == 0:
        raise ArithmeticGuardError("zero total reward points")
    return (reward_pool_size * reward_points) // total_reward_points


def calculate_vested_amount(granted_amount, program_end_timestamp, vesting_duration, current_timestamp):
    if current_timestamp >= program_end_timestamp + vesting_duration:
        return granted_amount
    if current_timestamp <= program_end_timestamp:
        return 0
    return (granted_amount * (current_timestamp - program_end_timestamp)) // vesting_duration


@dataclass
class LockdropAppGlobalState:
    program_end_timestamp: int
    reward_pool_size: int
    vesting_duration: int
    annual_yield_rate: int
    reward_asset_id: int
    total_reward_points: int
    total_claimed_reward_points: int
    total_locked_amount: int
    total_staker_count: int
    total_granted_amount: int
    total_released_amount: int

    manager: str = None
    deposit_asset_id: int = None
    funding_address: str = None

    @classmethod
    def from_globalstate(cls, global_state: dict):
        funding_address = global_state.get(FUNDING_ADDRESS_KEY)
        return cls(
            program_end_timestamp=global_state[PROGRAM_END_TIMESTAMP_KEY],
            reward_pool_size=global_state[REWARD_POOL_SIZE_KEY],
            vesting_duration=global_state[VESTING_DURATION_KEY],
            annual_yield_rate=global_state[ANNUAL_YIELD_RATE_KEY],
            reward_asset_id=global_state[REWARD_ASSET_ID_KEY],
            total_reward_points=global_state.get(TOTAL_REWARD_POINTS_KEY, 0),
            total_claimed_reward_points=global_state.get(TOTAL_CLAIMED_REWARD_POINTS_KEY, 0),
            total_locked_amount=global_state.get(TOTAL_LOCKED_AMOUNT_KEY, 0),
            total_staker_count=global_state.get(TOTAL_STAKER_COUNT_KEY, 0),
            total_granted_amount=global_state.get(TOTAL_GRANTED_AMOUNT_KEY, 0),
            total_released_amount=global_state.get(TOTAL_RELEASED_AMOUNT_KEY, 0),
            manager=encode_address(global_state[MANAGER_KEY]),
            deposit_asset_id=global_state.get(DEPOSIT_ASSET_ID_KEY),
            funding_address=encode_address(funding_address) if funding_address else None,
        )

    @property
    def is_initialized(self):
        return self.deposit_asset_id is not None

    @property
    def vesting_end_timestamp(self):
        return self.program_end_timestamp + self.vesting_duration

    def is_program_active(self, current_timestamp=None):
        if current_timestamp is None:
            current_timestamp = get_current_timestamp()
        return current_timestamp <= self.program_end_timestamp

    def get_reward_share(self, reward_points):
        return calculate_reward_share(self.reward_pool_size, reward_points, self.total_reward_points)

    def get_vested_amount(self, granted_amount, current_timestamp=None):
        if current_timestamp is None:
            current_timestamp = get_current_timestamp()
        return calculate_vested_amount(granted_amount, self.program_end_timestamp, self.vesting_duration, current_timestamp)
