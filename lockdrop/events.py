from algosdk import abi

from lockdrop.event import Event


create_application_event = Event(
    name="create_application",
    args=[
        abi.Argument(arg_type="uint64", name="reward_asset_id"),
        abi.Argument(arg_type="uint64", name="program_end_timestamp"),
        abi.Argument(arg_type="uint128", name="reward_pool_size"),
        abi.Argument(arg_type="uint64", name="vesting_duration"),
        abi.Argument(arg_type="uint64", name="annual_yield_rate"),
        abi.Argument(arg_type="address", name="manager_address"),
    ]
)


init_event = Event(
    name="init",
    args=[
        abi.Argument(arg_type="uint64", name="deposit_asset_id"),
        abi.Argument(arg_type="address", name="funding_address"),
        abi.Argument(arg_type="uint128", name="reward_pool_size"),
    ]
)


locked_event = Event(
    name="locked",
    args=[
        abi.Argument(arg_type="address", name="user_address"),
        abi.Argument(arg_type="uint128", name="amount"),
        abi.Argument(arg_type="uint64", name="lock_duration"),
        abi.Argument(arg_type="uint64", name="start_time"),
        abi.Argument(arg_type="uint128", name="expected_reward_points"),
    ]
)


unlocked_event = Event(
    name="unlocked",
    args=[
        abi.Argument(arg_type="address", name="user_address"),
        abi.Argument(arg_type="uint128", name="amount"),
        abi.Argument(arg_type="uint64", name="lock_duration"),
        abi.Argument(arg_type="uint128", name="reward_points"),
    ]
)


unlocked_early_event = Event(
    name="unlocked_early",
    args=[
        abi.Argument(arg_type="address", name="user_address"),
        abi.Argument(arg_type="uint128", name="amount"),
        abi.Argument(arg_type="uint64", name="elapsed_duration"),
        abi.Argument(arg_type="uint128", name="forfeited_reward_points"),
    ]
)


reward_granted_event = Event(
    name="reward_granted",
    args=[
        abi.Argument(arg_type="address", name="user_address"),
        abi.Argument(arg_type="uint128", name="amount"),
        abi.Argument(arg_type="uint128", name="reward_points"),
        abi.Argument(arg_type="uint128", name="total_reward_points"),
    ]
)


tokens_released_event = Event(
    name="tokens_released",
    args=[
        abi.Argument(arg_type="address", name="user_address"),
        abi.Argument(arg_type="uint128", name="amount"),
        abi.Argument(arg_type="uint128", name="released_amount"),
    ]
)


lockdrop_events = [
    create_application_event,
    init_event,
    locked_event,
    unlocked_event,
    unlocked_early_event,
    reward_granted_event,
    tokens_released_event,
]
