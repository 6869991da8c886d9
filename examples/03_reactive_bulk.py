#!/usr/bin/env python3
"""
03_reactive_bulk.py - Reactive Bulk Conversion

Streams a contact list through a ReactiveConverter. One contact is broken
(it has no public key); with FailurePolicy.SKIP it is reported and the rest
of the list still goes out.

What this example demonstrates:
- ReactiveConverter.contacts() as a pipe() operator
- FailurePolicy.FAIL vs. FailurePolicy.SKIP
- Reporting skipped items through on_skipped

Run with:
    python 03_reactive_bulk.py
"""

import logging

import reactivex as rx

from pyarp import ContactModel, Converter, FailurePolicy, ReactiveConverter

from demo_services import ECHO, build_services


def main():
    logging.basicConfig(level=logging.WARNING)

    contacts = [
        ECHO,
        ContactModel(identity="BROKEN12", public_key=None),
        ContactModel(identity="ALICE123", public_key=bytes(32), first_name="Alice"),
    ]
    converter = Converter(build_services())

    for policy in FailurePolicy:
        print(f"=== {policy.value} ===")
        reactive = ReactiveConverter(
            converter,
            policy=policy,
            on_skipped=lambda item, error: print(f"  skipped {item.identity}: {error}"),
        )
        rx.from_iterable(contacts).pipe(
            reactive.contacts(),
        ).subscribe(
            on_next=lambda payload: print(f"  sent {len(payload)} bytes"),
            on_error=lambda error: print(f"  stream failed: {error}"),
            on_completed=lambda: print("  done"),
        )


if __name__ == "__main__":
    main()
