import logging
from contextlib import contextmanager

from algosdk.encoding import decode_address, is_valid_address
from algosdk.logic import get_application_address

from lockdrop import utils
from lockdrop.constants import *
from lockdrop.events import (
    create_application_event,
    init_event,
    locked_event,
    unlocked_event,
    unlocked_early_event,
    reward_granted_event,
    tokens_released_event,
)
from lockdrop.exceptions import AssetError, PreconditionError, ReentrancyError, TransferError
from lockdrop.structs import AccountState, StakeRecord
from lockdrop.utils import LockdropAppGlobalState

logger = logging.getLogger(__name__)


class LockdropApp:
    """
    Serialized lockdrop ledger.

    Every state-changing entry point runs inside ``_app_call``: nested entry is
    rejected, local state is mutated before any external transfer, and the
    whole operation is rolled back if anything raises.
    """

    def __init__(self, app_id, config, creation_timestamp=None):
        self.app_id = app_id
        self.application_address = get_application_address(app_id)
        self.config = config
        self.current_timestamp = None

        self.boxes = {}
        self.assets = {config.reward_asset.asset_id: config.reward_asset}
        self.logs = []
        self.last_logs = []
        self._pending_logs = []
        self._operation_in_progress = None

        if creation_timestamp is None:
            creation_timestamp = self.get_current_timestamp()
        program_end_timestamp = creation_timestamp + config.program_duration
        if program_end_timestamp > MAX_UINT32:
            raise ValueError("program end does not fit a 32-bit timestamp")

        self.global_state = {
            MANAGER_KEY: decode_address(config.manager_address),
            REWARD_ASSET_ID_KEY: config.reward_asset.asset_id,
            PROGRAM_END_TIMESTAMP_KEY: program_end_timestamp,
            REWARD_POOL_SIZE_KEY: config.reward_pool_size,
            VESTING_DURATION_KEY: config.vesting_duration,
            ANNUAL_YIELD_RATE_KEY: config.annual_yield_rate,
            TOTAL_REWARD_POINTS_KEY: 0,
            TOTAL_CLAIMED_REWARD_POINTS_KEY: 0,
            TOTAL_LOCKED_AMOUNT_KEY: 0,
            TOTAL_STAKER_COUNT_KEY: 0,
            TOTAL_GRANTED_AMOUNT_KEY: 0,
            TOTAL_RELEASED_AMOUNT_KEY: 0,
        }
        log = create_application_event.encode(
            reward_asset_id=config.reward_asset.asset_id,
            program_end_timestamp=program_end_timestamp,
            reward_pool_size=config.reward_pool_size,
            vesting_duration=config.vesting_duration,
            annual_yield_rate=config.annual_yield_rate,
            manager_address=config.manager_address,
        )
        self.logs.append(log)
        self.last_logs = [log]
        logger.info(f"Created lockdrop app {app_id}, program ends at {program_end_timestamp}")

    def get_current_timestamp(self):
        if self.current_timestamp is not None:
            return self.current_timestamp
        return utils.get_current_timestamp()

    # State access

    def get_global_state(self):
        return LockdropAppGlobalState.from_globalstate(self.global_state)

    @property
    def program_end_timestamp(self):
        return self.global_state[PROGRAM_END_TIMESTAMP_KEY]

    @property
    def total_reward_points(self):
        return self.global_state[TOTAL_REWARD_POINTS_KEY]

    @property
    def reward_asset(self):
        return self.assets[self.global_state[REWARD_ASSET_ID_KEY]]

    @property
    def deposit_asset(self):
        asset_id = self.global_state.get(DEPOSIT_ASSET_ID_KEY)
        if asset_id is None:
            return None
        return self.assets[asset_id]

    def get_stake_box_name(self, address):
        return STAKE_BOX_PREFIX + decode_address(address)

    def get_account_state_box_name(self, address):
        return ACCOUNT_STATE_BOX_PREFIX + decode_address(address)

    def get_stake(self, address):
        box = self.boxes.get(self.get_stake_box_name(address))
        if box is None:
            return None
        return StakeRecord(box)

    def get_account_state(self, address):
        box = self.boxes.get(self.get_account_state_box_name(address))
        if box is None:
            return AccountState()
        return AccountState(box)

    def get_reward_points(self, address):
        return self.get_account_state(address).reward_points

    def _put_stake(self, address, stake):
        self.boxes[self.get_stake_box_name(address)] = bytes(stake._data)

    def _delete_stake(self, address):
        del self.boxes[self.get_stake_box_name(address)]

    def _put_account_state(self, address, account_state):
        self.boxes[self.get_account_state_box_name(address)] = bytes(account_state._data)

    def _add_global(self, key, delta):
        value = self.global_state[key] + delta
        assert value >= 0, key
        self.global_state[key] = value

    # Views

    def get_locking_cap(self, duration):
        return utils.get_locking_cap(duration)

    def calculate_reward_points(self, amount, duration):
        return utils.calculate_reward_points(amount, duration, self.global_state[ANNUAL_YIELD_RATE_KEY])

    def get_reward_share(self, address):
        return self.get_global_state().get_reward_share(self.get_reward_points(address))

    def get_vested_amount(self, address, current_timestamp=None):
        if current_timestamp is None:
            current_timestamp = self.get_current_timestamp()
        granted_amount = self.get_account_state(address).granted_amount
        return self.get_global_state().get_vested_amount(granted_amount, current_timestamp)

    def get_releasable_amount(self, address, current_timestamp=None):
        vested_amount = self.get_vested_amount(address, current_timestamp)
        return vested_amount - self.get_account_state(address).released_amount

    # Operation plumbing

    @contextmanager
    def _app_call(self, name, sender):
        if self._operation_in_progress is not None:
            raise ReentrancyError(f"{name} called during {self._operation_in_progress}")
        if not is_valid_address(sender):
            raise PreconditionError("invalid sender")

        global_state = dict(self.global_state)
        boxes = dict(self.boxes)
        assets = dict(self.assets)
        self._operation_in_progress = name
        self._pending_logs = []
        try:
            yield
        except Exception as e:
            self.global_state = global_state
            self.boxes = boxes
            self.assets = assets
            logger.warning(f"{name} by {sender} rejected: {e}")
            raise
        else:
            self.logs.extend(self._pending_logs)
            self.last_logs = self._pending_logs
        finally:
            self._pending_logs = []
            self._operation_in_progress = None

    def _emit(self, event, **kwargs):
        self._pending_logs.append(event.encode(**kwargs))

    def _check_uint(self, value, name):
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise PreconditionError(f"{name} out of range")

    def _send(self, asset, receiver, amount):
        try:
            success = asset.transfer(self.application_address, receiver, amount)
        except AssetError as e:
            raise TransferError(f"transfer failed: {e}") from e
        if not success:
            raise TransferError("transfer failed")

    def _pull(self, asset, owner, amount):
        try:
            success = asset.transfer_from(self.application_address, owner, self.application_address, amount)
        except AssetError as e:
            raise TransferError(f"transfer failed: {e}") from e
        if not success:
            raise TransferError("transfer failed")

    # Administrative funding

    def init(self, sender, deposit_asset, funding_address):
        with self._app_call("init", sender):
            if decode_address(sender) != self.global_state[MANAGER_KEY]:
                raise PreconditionError("unauthorized")
            if DEPOSIT_ASSET_ID_KEY in self.global_state:
                raise PreconditionError("already initialized")
            if deposit_asset.asset_id == self.global_state[REWARD_ASSET_ID_KEY]:
                raise PreconditionError("deposit asset must differ from reward asset")
            if not is_valid_address(funding_address):
                raise PreconditionError("invalid funding address")

            reward_pool_size = self.global_state[REWARD_POOL_SIZE_KEY]
            reward_asset = self.reward_asset
            if reward_asset.balance_of(funding_address) < reward_pool_size:
                raise PreconditionError("insufficient funding balance")
            if reward_asset.allowance(funding_address, self.application_address) < reward_pool_size:
                raise PreconditionError("insufficient funding allowance")

            self.assets[deposit_asset.asset_id] = deposit_asset
            self.global_state[DEPOSIT_ASSET_ID_KEY] = deposit_asset.asset_id
            self.global_state[FUNDING_ADDRESS_KEY] = decode_address(funding_address)
            self._emit(
                init_event,
                deposit_asset_id=deposit_asset.asset_id,
                funding_address=funding_address,
                reward_pool_size=reward_pool_size,
            )

            self._pull(reward_asset, funding_address, reward_pool_size)
            logger.info(f"Initialized app {self.app_id} with deposit asset {deposit_asset.asset_id}, pool {reward_pool_size}")

    # Stake ledger

    def lock(self, sender, amount, duration):
        with self._app_call("lock", sender):
            now = self.get_current_timestamp()
            program_end_timestamp = self.program_end_timestamp
            self._check_uint(amount, "amount")
            self._check_uint(duration, "lock_duration")

            if self.deposit_asset is None:
                raise PreconditionError("not initialized")
            if not self.get_global_state().is_program_active(now):
                raise PreconditionError("program ended")
            if duration == 0:
                raise PreconditionError("zero lock duration")
            if now > program_end_timestamp - duration:
                raise PreconditionError("lock ends after program")
            if self.get_stake(sender) is not None:
                raise PreconditionError("stake exists")
            if amount > self.get_locking_cap(duration):
                raise PreconditionError("amount exceeds cap")

            reward_points = self.calculate_reward_points(amount, duration)

            stake = StakeRecord()
            stake.amount = amount
            stake.lock_duration = duration
            stake.start_time = now
            stake.expected_reward_points = reward_points
            self._put_stake(sender, stake)

            account_state = self.get_account_state(sender)
            account_state.reward_points = account_state.reward_points + reward_points
            self._put_account_state(sender, account_state)

            self._add_global(TOTAL_REWARD_POINTS_KEY, reward_points)
            self._add_global(TOTAL_LOCKED_AMOUNT_KEY, amount)
            self._add_global(TOTAL_STAKER_COUNT_KEY, 1)
            self._emit(
                locked_event,
                user_address=sender,
                amount=amount,
                lock_duration=duration,
                start_time=now,
                expected_reward_points=reward_points,
            )

            self._pull(self.deposit_asset, sender, amount)
            logger.info(f"{sender} locked {amount} for {duration}s, {reward_points} reward points")
            return reward_points

    def unlock_tokens(self, sender):
        with self._app_call("unlock_tokens", sender):
            now = self.get_current_timestamp()
            stake = self.get_stake(sender)
            if stake is None:
                raise PreconditionError("no stake")
            if now <= stake.start_time:
                raise PreconditionError("unlock at start time")

            if now < stake.start_time + stake.lock_duration:
                # Reverse the points credited at lock time.
                account_state = self.get_account_state(sender)
                account_state.reward_points = account_state.reward_points - stake.expected_reward_points
                self._put_account_state(sender, account_state)
                self._add_global(TOTAL_REWARD_POINTS_KEY, -stake.expected_reward_points)
                self._emit(
                    unlocked_early_event,
                    user_address=sender,
                    amount=stake.amount,
                    elapsed_duration=now - stake.start_time,
                    forfeited_reward_points=stake.expected_reward_points,
                )
                logger.info(f"{sender} unlocked {stake.amount} early, forfeiting {stake.expected_reward_points} reward points")
            else:
                self._emit(
                    unlocked_event,
                    user_address=sender,
                    amount=stake.amount,
                    lock_duration=stake.lock_duration,
                    reward_points=stake.expected_reward_points,
                )
                logger.info(f"{sender} unlocked {stake.amount}")

            self._delete_stake(sender)
            self._add_global(TOTAL_LOCKED_AMOUNT_KEY, -stake.amount)
            self._add_global(TOTAL_STAKER_COUNT_KEY, -1)

            self._send(self.deposit_asset, sender, stake.amount)
            return stake

    # Reward accounting

    def get_rewards(self, sender):
        with self._app_call("get_rewards", sender):
            now = self.get_current_timestamp()
            if self.get_global_state().is_program_active(now):
                raise PreconditionError("program not ended")
            if self.get_stake(sender) is not None:
                raise PreconditionError("unlock first")

            account_state = self.get_account_state(sender)
            reward_points = account_state.reward_points
            if reward_points == 0:
                raise PreconditionError("no reward points")

            total_reward_points = self.total_reward_points
            amount = utils.calculate_reward_share(self.global_state[REWARD_POOL_SIZE_KEY], reward_points, total_reward_points)

            account_state.reward_points = 0
            account_state.granted_amount = amount
            self._put_account_state(sender, account_state)
            self._add_global(TOTAL_CLAIMED_REWARD_POINTS_KEY, reward_points)
            self._add_global(TOTAL_GRANTED_AMOUNT_KEY, amount)
            self._emit(
                reward_granted_event,
                user_address=sender,
                amount=amount,
                reward_points=reward_points,
                total_reward_points=total_reward_points,
            )
            logger.info(f"{sender} granted {amount} for {reward_points}/{total_reward_points} reward points")
            return amount

    # Vesting

    def release(self, sender):
        with self._app_call("release", sender):
            now = self.get_current_timestamp()
            account_state = self.get_account_state(sender)
            vested_amount = self.get_global_state().get_vested_amount(account_state.granted_amount, now)
            releasable_amount = vested_amount - account_state.released_amount
            if releasable_amount <= 0:
                raise PreconditionError("nothing releasable")

            account_state.released_amount = account_state.released_amount + releasable_amount
            self._put_account_state(sender, account_state)
            self._add_global(TOTAL_RELEASED_AMOUNT_KEY, releasable_amount)
            self._emit(
                tokens_released_event,
                user_address=sender,
                amount=releasable_amount,
                released_amount=account_state.released_amount,
            )

            self._send(self.reward_asset, sender, releasable_amount)
            logger.info(f"{sender} released {releasable_amount}, {account_state.released_amount} in total")
            return releasable_amount
