from lockdrop.structs import get_struct


AccountState = get_struct("AccountState")


class LockdropClient():
    def __init__(self, app, user_address) -> None:
        self.app = app
        self.app_id = app.app_id
        self.application_address = app.application_address
        self.user_address = user_address
        self.current_timestamp = None

    def get_box(self, box_name, struct_name):
        box_value = self.app.boxes[box_name]
        struct_class = get_struct(struct_name)
        struct = struct_class(box_value)

        return struct

    def box_exists(self, box_name):
        return box_name in self.app.boxes

    def get_global(self, key, default=None):
        return self.app.global_state.get(key, default)

    def get_current_timestamp(self):
        if self.current_timestamp is not None:
            return self.current_timestamp
        return self.app.get_current_timestamp()

    def _call(self, method, *args):
        # The client's clock applies to this call only.
        previous_timestamp = self.app.current_timestamp
        if self.current_timestamp is not None:
            self.app.current_timestamp = self.current_timestamp
        try:
            return method(self.user_address, *args)
        finally:
            self.app.current_timestamp = previous_timestamp

    def get_stake_box_name(self, account_address: str):
        return self.app.get_stake_box_name(account_address)

    def get_account_state_box_name(self, account_address: str):
        return self.app.get_account_state_box_name(account_address)

    def get_stake(self, account_address=None):
        box_name = self.get_stake_box_name(account_address or self.user_address)
        if not self.box_exists(box_name):
            return None
        return self.get_box(box_name, "StakeRecord")

    def get_account_state(self, account_address=None):
        box_name = self.get_account_state_box_name(account_address or self.user_address)
        if not self.box_exists(box_name):
            return AccountState()
        return self.get_box(box_name, "AccountState")

    def init(self, deposit_asset, funding_address):
        return self._call(self.app.init, deposit_asset, funding_address)

    def lock(self, amount: int, duration: int):
        return self._call(self.app.lock, amount, duration)

    def unlock_tokens(self):
        return self._call(self.app.unlock_tokens)

    def get_rewards(self):
        return self._call(self.app.get_rewards)

    def release(self):
        return self._call(self.app.release)

    def get_releasable_amount(self):
        return self.app.get_releasable_amount(self.user_address, self.current_timestamp)
