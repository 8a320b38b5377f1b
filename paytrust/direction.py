"""
Response directions.

A direction decides what a provider call hands back to the caller: the
parsed body, the raw response, or (for ``NoHttpRequestDirection``) the
signed payload itself without any HTTP request being made. Directions are
looked up by name in a small service container.
"""

import json
from typing import Any, Callable, Dict, Mapping, Union

from paytrust.common.exceptions import (
    INVALID_DIRECTION,
    ContainerError,
    InvalidConfigError,
    InvalidResponseError,
    ServiceNotFoundError,
)


class Direction:
    """Turns the outcome of a provider call into the caller's result."""

    def parse(self, payload: Mapping[str, Any], response: Any) -> Any:
        raise NotImplementedError


class ResponseDirection(Direction):
    """Return the transport response untouched."""

    def parse(self, payload, response):
        return response


class CollectionDirection(Direction):
    """Decode a JSON body into a dict."""

    def parse(self, payload, response):
        if isinstance(response, Mapping):
            return dict(response)

        try:
            data = json.loads(response)
        except (TypeError, ValueError) as e:
            raise InvalidResponseError("Response Body Is Not JSON", extra={"response": response}) from e

        if not isinstance(data, dict):
            raise InvalidResponseError("Response Body Is Not A JSON Object", extra={"response": response})

        return data


class NoHttpRequestDirection(Direction):
    """Skip the request; the caller gets the signed payload back."""

    def parse(self, payload, response):
        return dict(payload)


class Container:
    """
    Minimal service registry.

    Unregistered classes are built on demand with no arguments.
    """

    def __init__(self):
        self._services: Dict[Any, Any] = {}
        self._factories: Dict[Any, Callable[[], Any]] = {}

    def set(self, name: Any, service: Any) -> None:
        self._services[name] = service

    def factory(self, name: Any, builder: Callable[[], Any]) -> None:
        self._factories[name] = builder

    def has(self, name: Any) -> bool:
        return name in self._services or name in self._factories

    def get(self, name: Any) -> Any:
        """
        Raises:
            ServiceNotFoundError: If nothing is registered under ``name``
            ContainerError: If building the service fails
        """
        if name in self._services:
            return self._services[name]

        builder = self._factories.get(name)
        if builder is None and isinstance(name, type):
            builder = name

        if builder is None:
            raise ServiceNotFoundError(f"Service Not Found -- [{name}]")

        try:
            service = builder()
        except Exception as e:
            raise ContainerError(f"Cannot Build Service -- [{name}]: {e}") from e

        self._services[name] = service
        return service


def get_direction(container: Container, direction: Any) -> Direction:
    """
    Resolve ``direction`` to a ``Direction`` instance.

    The container is asked first (twice when the first lookup yields another
    name). A lookup that fails with ``ServiceNotFoundError`` or
    ``ContainerError`` leaves ``direction`` as given.

    Raises:
        InvalidConfigError: If the result is not a ``Direction``
    """
    try:
        direction = container.get(direction)
        direction = container.get(direction) if isinstance(direction, str) else direction
    except (ContainerError, ServiceNotFoundError):
        pass

    if not isinstance(direction, Direction):
        raise InvalidConfigError(f"Invalid Direction -- [{direction}]", INVALID_DIRECTION)

    return direction


def should_do_http_request(direction: Union[Direction, type]) -> bool:
    cls = direction if isinstance(direction, type) else type(direction)
    return not issubclass(cls, NoHttpRequestDirection)
