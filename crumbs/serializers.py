import abc
import json
import typing


class CookieSerializer(abc.ABC):
    @abc.abstractmethod
    def dumps(self, value: typing.Any) -> str:
        pass

    @abc.abstractmethod
    def loads(self, value: str) -> typing.Any:
        pass


class JSONCookieSerializer(CookieSerializer):
    def dumps(self, value: typing.Any) -> str:
        return json.dumps(value, separators=(",", ":"), allow_nan=False)

    def loads(self, value: str) -> typing.Any:
        return json.loads(value)
