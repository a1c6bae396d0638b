DAY = 86400
WEEK = DAY * 7
DAYS_PER_YEAR = 365

MAX_UINT32 = 2 ** 32 - 1
MAX_UINT64 = 18446744073709551615
MAX_UINT128 = 2 ** 128 - 1

MANAGER_KEY = b"manager"
REWARD_ASSET_ID_KEY = b"reward_asset_id"
DEPOSIT_ASSET_ID_KEY = b"deposit_asset_id"
FUNDING_ADDRESS_KEY = b"funding_address"

PROGRAM_END_TIMESTAMP_KEY = b"program_end_timestamp"
REWARD_POOL_SIZE_KEY = b"reward_pool_size"
VESTING_DURATION_KEY = b"vesting_duration"
ANNUAL_YIELD_RATE_KEY = b"annual_yield_rate"

TOTAL_REWARD_POINTS_KEY = b"total_reward_points"
TOTAL_CLAIMED_REWARD_POINTS_KEY = b"total_claimed_reward_points"
TOTAL_LOCKED_AMOUNT_KEY = b"total_locked_amount"
TOTAL_STAKER_COUNT_KEY = b"total_staker_count"
TOTAL_GRANTED_AMOUNT_KEY = b"total_granted_amount"
TOTAL_RELEASED_AMOUNT_KEY = b"total_released_amount"

STAKE_BOX_PREFIX = b"s"
ACCOUNT_STATE_BOX_PREFIX = b"a"

# (first day, last day, amount cap), keyed by lock duration in whole days.
LOCKING_TIERS = [
    (30, 60, 10_000),
    (90, 90, 10_000),
    (180, 180, 5_000),
    (360, 360, 5_000),
    (720, 720, 2_000),
]
