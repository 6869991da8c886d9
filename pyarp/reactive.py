# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Reactive bulk conversion.

Provides RxPY operators that turn a stream of domain objects into encoded
payloads, one conversion per item. What happens when an item cannot be
converted is decided by the FailurePolicy:

- FAIL: the stream errors with the ConversionError (default)
- SKIP: the item is dropped, reported and logged; siblings are unaffected

Defects (a builder consumed twice, an encoder fault) always fail the stream.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, TypeVar

import reactivex as rx
from reactivex import Observable

from .exceptions import ConversionError

if TYPE_CHECKING:
    from .builder import MsgpackBuilder
    from .converter import Converter
    from .receivers import ModelWrapper
    from .types import ContactModel, ConversationModel, DistributionListModel, GroupModel, MessageModel

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailurePolicy(str, Enum):
    """What a bulk stream does with an item that fails to convert."""

    FAIL = "fail"
    SKIP = "skip"


class ReactiveConverter:
    """
    Stream operators on top of a Converter.

    Example:
        >>> reactive = ReactiveConverter(converter, policy=FailurePolicy.SKIP)
        >>> rx.from_iterable(contacts).pipe(
        ...     reactive.contacts(),
        ... ).subscribe(on_next=transport.send)
    """

    def __init__(
        self,
        converter: Converter,
        policy: FailurePolicy = FailurePolicy.FAIL,
        on_skipped: Callable[[Any, ConversionError], None] | None = None,
    ) -> None:
        """
        Initialize reactive converter.

        Args:
            converter: Converter performing the single-item conversions.
            policy: Failure policy for items that cannot be converted.
            on_skipped: Called with (item, error) for every skipped item.
        """
        self._converter = converter
        self._policy = policy
        self._on_skipped = on_skipped

    @property
    def policy(self) -> FailurePolicy:
        return self._policy

    def encode(self, convert: Callable[[T], MsgpackBuilder]) -> Callable[[Observable[T]], Observable[bytes]]:
        """
        Create an operator that converts and encodes every item.

        Args:
            convert: Single-item conversion returning an unconsumed builder.

        Returns:
            Operator function for use with pipe().
        """
        def _encode(source: Observable[T]) -> Observable[bytes]:
            def subscribe(observer: Any, scheduler: Any = None) -> Any:
                def on_next(item: T) -> None:
                    try:
                        # Each item gets its own builder, a failure can't leak into siblings
                        payload = convert(item).consume()
                    except ConversionError as e:
                        if self._policy is FailurePolicy.FAIL:
                            observer.on_error(e)
                            return
                        logger.warning("Skipping %s that failed to convert: %s", type(item).__name__, e)
                        if self._on_skipped is not None:
                            self._on_skipped(item, e)
                        return
                    except Exception as e:
                        observer.on_error(e)
                        return
                    observer.on_next(payload)

                return source.subscribe(
                    on_next=on_next,
                    on_error=observer.on_error,
                    on_completed=observer.on_completed,
                    scheduler=scheduler,
                )

            return rx.create(subscribe)

        return _encode

    def contacts(self) -> Callable[[Observable[ContactModel]], Observable[bytes]]:
        return self.encode(self._converter.contact)

    def groups(self) -> Callable[[Observable[GroupModel]], Observable[bytes]]:
        return self.encode(self._converter.group)

    def distribution_lists(self) -> Callable[[Observable[DistributionListModel]], Observable[bytes]]:
        return self.encode(self._converter.distribution_list)

    def conversations(self, send_avatar: bool = False) -> Callable[[Observable[ConversationModel]], Observable[bytes]]:
        return self.encode(lambda c: self._converter.conversation(c, send_avatar))

    def messages(
        self,
        receiver: ModelWrapper,
        send_thumbnail: bool = False,
    ) -> Callable[[Observable[MessageModel]], Observable[bytes]]:
        """
        Create an operator encoding the messages of one conversation at FULL detail.

        Items are emitted in stream order; reverse a storage page before
        streaming it to send it oldest first.
        """
        return self.encode(lambda m: self._converter.message(m, receiver, send_thumbnail))


def from_messages(messages: list[MessageModel]) -> Observable[MessageModel]:
    """Stream a page of messages (newest first in storage) oldest first."""
    return rx.from_iterable(list(reversed(messages)))
