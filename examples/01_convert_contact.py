#!/usr/bin/env python3
"""
01_convert_contact.py - Converting a Contact

The foundational example: resolve a receiver address sent by the remote
client, convert the contact and encode it.

What this example demonstrates:
- Building a Services bundle from collaborator implementations
- Converter.receiver() to resolve a (type, id) address
- Converter.contact() and Converter.encode()
- Handling ConversionError at the transport boundary

Expected Output:
    Resolved ModelWrapper(type='contact', id='ECHOECHO')
    Encoded ... bytes
    displayName: Echo
    color: #2196F3
    Cannot convert: Receiver 'NOBODY12' of type 'contact' not found

Run with:
    python 01_convert_contact.py
"""

import msgpack

from pyarp import ConversionError, Converter

from demo_services import build_services


def main():
    converter = Converter(build_services())

    wrapper = converter.receiver("contact", "ECHOECHO")
    print(f"Resolved {wrapper!r}")

    payload = converter.encode(converter.contact(wrapper.model))
    print(f"Encoded {len(payload)} bytes")

    decoded = msgpack.unpackb(payload)
    print(f"displayName: {decoded['displayName']}")
    print(f"color: {decoded['color']}")

    # Failures are reported to the remote client, never swallowed
    try:
        converter.receiver("contact", "NOBODY12")
    except ConversionError as e:
        print(f"Cannot convert: {e}")


if __name__ == "__main__":
    main()
