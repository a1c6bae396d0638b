from tinyman.utils import int_to_bytes, bytes_to_int

from lockdrop.exceptions import PreconditionError


class Field:
    def __init__(self, size):
        self.size = size
        self.offset = None
        self.name = None

    def __set_name__(self, owner, name):
        self.name = name

    @property
    def max_value(self):
        return 2 ** (self.size * 8) - 1

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return bytes_to_int(bytes(instance._data[self.offset:self.offset + self.size]))

    def __set__(self, instance, value):
        if value < 0 or value > self.max_value:
            raise PreconditionError(f"{self.name} out of range")
        instance._data[self.offset:self.offset + self.size] = int_to_bytes(value, self.size)


class Struct:
    """
    Fixed-size record packed into a single box value.

    Fields are big-endian unsigned integers laid out in declaration order.
    """
    _fields = []
    size = 0

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        offset = 0
        fields = []
        for value in cls.__dict__.values():
            if isinstance(value, Field):
                value.offset = offset
                offset += value.size
                fields.append(value)
        cls._fields = fields
        cls.size = offset

    def __init__(self, data=None):
        if data is None:
            data = bytes(self.size)
        if len(data) != self.size:
            raise ValueError(f"{type(self).__name__} expects {self.size} bytes, got {len(data)}")
        self._data = bytearray(data)

    def to_dict(self):
        return {field.name: getattr(self, field.name) for field in self._fields}

    def __eq__(self, other):
        return type(self) is type(other) and self._data == other._data

    def __repr__(self):
        values = ", ".join(f"{k}={v}" for k, v in self.to_dict().items())
        return f"{type(self).__name__}({values})"


class StakeRecord(Struct):
    amount = Field(9)
    lock_duration = Field(4)
    start_time = Field(4)
    expected_reward_points = Field(16)


class AccountState(Struct):
    reward_points = Field(16)
    granted_amount = Field(16)
    released_amount = Field(16)


STRUCTS = {
    "StakeRecord": StakeRecord,
    "AccountState": AccountState,
}


def get_struct(name):
    return STRUCTS[name]
