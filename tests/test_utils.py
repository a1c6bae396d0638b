import unittest

from algosdk.account import generate_account

from lockdrop.asset import Asset
from lockdrop.config import ProgramConfig
from lockdrop.constants import DAY, MAX_UINT128
from lockdrop.event import decode_logs
from lockdrop.events import locked_event, lockdrop_events, reward_granted_event
from lockdrop.exceptions import ArithmeticGuardError, PreconditionError
from lockdrop.structs import AccountState, StakeRecord, get_struct
from lockdrop.utils import (
    LockdropAppGlobalState,
    calculate_reward_points,
    calculate_reward_share,
    calculate_vested_amount,
    get_locking_cap,
)

from tests.constants import *


class RewardMathTests(unittest.TestCase):

    def test_calculate_reward_points(self):
        for amount, duration, rate in [(1_000, 90 * DAY, 10), (1, 30 * DAY, 1), (2_000, 720 * DAY, 7), (5, 100, 1)]:
            with self.subTest(amount=amount, duration=duration, rate=rate):
                self.assertEqual(calculate_reward_points(amount, duration, rate), (amount * rate * duration) // 365)

    def test_calculate_reward_points_fail_zero(self):
        for amount, duration in [(0, 90 * DAY), (1_000, 0), (1, 1)]:
            with self.subTest(amount=amount, duration=duration):
                with self.assertRaises(PreconditionError) as e:
                    calculate_reward_points(amount, duration, 1)
                self.assertEqual(e.exception.reason, "zero reward points")

    def test_get_locking_cap(self):
        self.assertEqual(get_locking_cap(30 * DAY), 10_000)
        self.assertEqual(get_locking_cap(45 * DAY + DAY - 1), 10_000)
        self.assertEqual(get_locking_cap(60 * DAY), 10_000)
        self.assertEqual(get_locking_cap(90 * DAY), 10_000)
        self.assertEqual(get_locking_cap(180 * DAY), 5_000)
        self.assertEqual(get_locking_cap(360 * DAY), 5_000)
        self.assertEqual(get_locking_cap(720 * DAY), 2_000)

        for duration in [0, 1, DAY - 1, 29 * DAY, 61 * DAY, 120 * DAY, 721 * DAY]:
            with self.subTest(duration=duration):
                with self.assertRaises(PreconditionError):
                    get_locking_cap(duration)

    def test_calculate_reward_share(self):
        self.assertEqual(calculate_reward_share(1_000, 1, 3), 333)
        self.assertEqual(calculate_reward_share(1_000, 3, 3), 1_000)
        with self.assertRaises(ArithmeticGuardError):
            calculate_reward_share(1_000, 1, 0)

    def test_calculate_vested_amount(self):
        granted_amount = 1_000_003
        program_end = MAY_1
        vesting_duration = 100

        self.assertEqual(calculate_vested_amount(granted_amount, program_end, vesting_duration, program_end - 1), 0)
        self.assertEqual(calculate_vested_amount(granted_amount, program_end, vesting_duration, program_end), 0)
        self.assertEqual(calculate_vested_amount(granted_amount, program_end, vesting_duration, program_end + 1), 10_000)
        self.assertEqual(calculate_vested_amount(granted_amount, program_end, vesting_duration, program_end + 33), 330_000)
        self.assertEqual(calculate_vested_amount(granted_amount, program_end, vesting_duration, program_end + 100), granted_amount)
        self.assertEqual(calculate_vested_amount(granted_amount, program_end, vesting_duration, program_end + 10_000), granted_amount)

    def test_is_program_active(self):
        global_state = LockdropAppGlobalState(
            program_end_timestamp=PROGRAM_END,
            reward_pool_size=REWARD_POOL_SIZE,
            vesting_duration=VESTING_DURATION,
            annual_yield_rate=ANNUAL_YIELD_RATE,
            reward_asset_id=REWARD_ASSET_ID,
            total_reward_points=0,
            total_claimed_reward_points=0,
            total_locked_amount=0,
            total_staker_count=0,
            total_granted_amount=0,
            total_released_amount=0,
        )
        self.assertTrue(global_state.is_program_active(MAY_1))
        self.assertTrue(global_state.is_program_active(PROGRAM_END))
        self.assertFalse(global_state.is_program_active(PROGRAM_END + 1))
        self.assertEqual(global_state.vesting_end_timestamp, PROGRAM_END + VESTING_DURATION)


class StructTests(unittest.TestCase):

    def test_stake_record_layout(self):
        self.assertEqual(StakeRecord.size, 33)
        self.assertEqual(AccountState.size, 48)
        self.assertIs(get_struct("StakeRecord"), StakeRecord)

        stake = StakeRecord()
        stake.amount = 2 ** 72 - 1
        stake.lock_duration = 720 * DAY
        stake.start_time = MAY_1
        stake.expected_reward_points = MAX_UINT128

        loaded = StakeRecord(bytes(stake._data))
        self.assertEqual(loaded, stake)
        self.assertDictEqual(
            loaded.to_dict(),
            {
                "amount": 2 ** 72 - 1,
                "lock_duration": 720 * DAY,
                "start_time": MAY_1,
                "expected_reward_points": MAX_UINT128,
            }
        )
        self.assertEqual(bytes(stake._data[:9]), b"\xff" * 9)

    def test_field_range(self):
        stake = StakeRecord()
        with self.assertRaises(PreconditionError) as e:
            stake.amount = 2 ** 72
        self.assertEqual(e.exception.reason, "amount out of range")

        with self.assertRaises(PreconditionError):
            stake.start_time = 2 ** 32
        with self.assertRaises(PreconditionError):
            stake.lock_duration = -1
        self.assertEqual(stake.to_dict(), StakeRecord().to_dict())

    def test_invalid_size(self):
        with self.assertRaises(ValueError):
            AccountState(b"\x00" * 10)


class EventTests(unittest.TestCase):

    def test_encode_decode(self):
        _, address = generate_account()
        log = locked_event.encode(
            user_address=address,
            amount=1_000,
            lock_duration=90 * DAY,
            start_time=MAY_1,
            expected_reward_points=213_041_095,
        )
        self.assertEqual(log[:4], locked_event.selector)
        self.assertEqual(locked_event.signature, "locked(address,uint128,uint64,uint64,uint128)")

        events = decode_logs([log, b"\x00\x00\x00\x00unknown"], lockdrop_events)
        self.assertEqual(len(events), 1)
        self.assertDictEqual(
            events[0],
            {
                "event_name": "locked",
                "user_address": address,
                "amount": 1_000,
                "lock_duration": 90 * DAY,
                "start_time": MAY_1,
                "expected_reward_points": 213_041_095,
            }
        )

    def test_selectors_are_unique(self):
        selectors = [event.selector for event in lockdrop_events]
        self.assertEqual(len(selectors), len(set(selectors)))
        self.assertNotEqual(locked_event.selector, reward_granted_event.selector)


class AssetTests(unittest.TestCase):

    def setUp(self):
        self.asset = Asset(DEPOSIT_ASSET_ID, unit_name="DEP")
        _, self.owner = generate_account()
        _, self.spender = generate_account()
        _, self.receiver = generate_account()
        self.asset.mint(self.owner, 100)

    def test_transfer(self):
        self.assertTrue(self.asset.transfer(self.owner, self.receiver, 40))
        self.assertEqual(self.asset.balance_of(self.owner), 60)
        self.assertEqual(self.asset.balance_of(self.receiver), 40)
        self.assertFalse(self.asset.transfer(self.owner, self.receiver, 61))
        self.assertEqual(self.asset.balance_of(self.owner), 60)

    def test_transfer_from(self):
        self.assertFalse(self.asset.transfer_from(self.spender, self.owner, self.receiver, 10))

        self.asset.approve(self.owner, self.spender, 50)
        self.assertTrue(self.asset.transfer_from(self.spender, self.owner, self.receiver, 30))
        self.assertEqual(self.asset.allowance(self.owner, self.spender), 20)
        self.assertEqual(self.asset.balance_of(self.receiver), 30)

        self.asset.set_balance(self.owner, 5)
        self.assertFalse(self.asset.transfer_from(self.spender, self.owner, self.receiver, 10))
        self.assertEqual(self.asset.allowance(self.owner, self.spender), 20)


class ProgramConfigTests(unittest.TestCase):

    def test_invalid_config(self):
        _, manager_address = generate_account()
        reward_asset = Asset(REWARD_ASSET_ID)
        params = dict(
            reward_asset=reward_asset,
            program_duration=PROGRAM_DURATION,
            reward_pool_size=REWARD_POOL_SIZE,
            vesting_duration=VESTING_DURATION,
            manager_address=manager_address,
            annual_yield_rate=ANNUAL_YIELD_RATE,
        )
        ProgramConfig(**params)

        for key, value in [("manager_address", "manager"), ("program_duration", 0), ("vesting_duration", 0), ("reward_pool_size", 0), ("annual_yield_rate", 0)]:
            with self.subTest(key=key):
                with self.assertRaises(ValueError):
                    ProgramConfig(**dict(params, **{key: value}))
