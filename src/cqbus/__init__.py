"""cqbus — in-process command/query dispatcher with configurable retry backoff."""

from cqbus.bootstrap import Buses, add_cqrs
from cqbus.config.models import BackoffPolicy, RetryAlgorithm
from cqbus.domain.errors import (
    ConfigurationError,
    DispatchCancelledError,
    DispatchError,
    InvocationContractError,
    ResolutionError,
    RetryDelayError,
    RetryExhaustedError,
)
from cqbus.domain.handlers import CommandHandler, QueryHandler
from cqbus.domain.requests import Command, Query
from cqbus.infrastructure.registry import HandlerRegistry
from cqbus.services.cancellation import CancellationToken
from cqbus.services.dispatcher import CommandBus, DefaultRetryStrategy, QueryBus

__version__ = "0.1.0"

__all__ = [
    "BackoffPolicy",
    "Buses",
    "CancellationToken",
    "Command",
    "CommandBus",
    "CommandHandler",
    "ConfigurationError",
    "DefaultRetryStrategy",
    "DispatchCancelledError",
    "DispatchError",
    "HandlerRegistry",
    "InvocationContractError",
    "Query",
    "QueryBus",
    "QueryHandler",
    "ResolutionError",
    "RetryAlgorithm",
    "RetryDelayError",
    "RetryExhaustedError",
    "add_cqrs",
]
