from dataclasses import dataclass

from algosdk import abi
from algosdk.encoding import checksum


@dataclass
class Event:
    name: str
    args: list

    @property
    def signature(self):
        arg_string = ",".join(str(arg.type) for arg in self.args)
        return f"{self.name}({arg_string})"

    @property
    def selector(self):
        return checksum(self.signature.encode("utf-8"))[:4]

    @property
    def tuple_type(self):
        return abi.TupleType([arg.type for arg in self.args])

    def encode(self, **kwargs):
        values = [kwargs[arg.name] for arg in self.args]
        return self.selector + self.tuple_type.encode(values)

    def decode(self, log):
        selector, event_data = log[:4], log[4:]
        assert self.selector == selector

        data = {"event_name": self.name}
        values = self.tuple_type.decode(event_data)
        for arg, value in zip(self.args, values):
            data[arg.name] = value
        return data


def get_event_by_log(log, events):
    selector = log[:4]
    for event in events:
        if event.selector == selector:
            return event
    return None


def decode_logs(logs, events):
    decoded_logs = []
    for log in logs:
        event = get_event_by_log(log, events)
        if event is not None:
            decoded_logs.append(event.decode(log))
    return decoded_logs
